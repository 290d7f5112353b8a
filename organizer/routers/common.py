from contextlib import contextmanager

from fastapi import HTTPException, Request

from organizer.core.logging import get_app_logger
from organizer.db.models import Entity
from organizer.services.audit import log_access
from organizer.services.provider import ProviderError
from organizer.services.records import RecordNotFound

logger = get_app_logger()

VERBS = {
    "list": "fetching",
    "create": "creating",
    "update": "updating",
    "toggle": "toggling",
    "hide": "hiding",
    "delete": "deleting",
}


def _subject(entity: Entity, action: str) -> str:
    return entity.label + "s" if action == "list" else entity.label


@contextmanager
def record_errors(
    entity: Entity,
    action: str,
    request: Request | None = None,
    user_id: str | None = None,
    record_id: str | None = None,
):
    """Провайдерские ошибки -> 500, отсутствующая запись -> 404."""
    try:
        yield
    except RecordNotFound:
        if request is not None:
            log_access(action, False, entity.table, user_id, record_id, "not_found", request)
        raise HTTPException(status_code=404, detail=f"{entity.label.capitalize()} not found")
    except ProviderError as exc:
        logger.error(f"Error {VERBS[action]} {entity.table}: {exc.message}")
        if request is not None:
            log_access(action, False, entity.table, user_id, record_id, "provider_error", request)
        raise HTTPException(status_code=500, detail=f"Error {VERBS[action]} {_subject(entity, action)}")

    if request is not None:
        log_access(action, True, entity.table, user_id, record_id, None, request)
