from fastapi import Request

from organizer.core.bruteforce import client_key
from organizer.core.logging import get_security_logger

sec_logger = get_security_logger()


def log_access(
    action: str,
    success: bool,
    entity: str | None = None,
    user_id: str | None = None,
    record_id: str | None = None,
    reason: str | None = None,
    request: Request | None = None,
):
    ip = client_key(request) if request else None

    line = (
        f"action={action} success={success} entity={entity} "
        f"user={user_id} record={record_id} ip={ip}"
    )
    if reason:
        line += f" reason={reason}"

    if success:
        sec_logger.info(line)
    else:
        sec_logger.warning(line)
