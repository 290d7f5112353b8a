import math
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from fastapi import Request

from organizer.core.logging import get_security_logger

sec_logger = get_security_logger()

UNKNOWN_CLIENT = "unknown"


@dataclass
class LoginAttemptRecord:
    key: str
    count: int
    window_start: float
    blocked: bool = False
    blocked_until: Optional[float] = None


@dataclass(frozen=True)
class Admission:
    allowed: bool
    retry_after: int = 0  # минуты, с округлением вверх


def client_key(request: Request) -> str:
    """
    Ключ клиента: первый адрес из X-Forwarded-For, затем X-Real-IP,
    затем адрес соединения. Все неопознанные клиенты делят ключ "unknown".
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT


class BruteForceGuard:
    def __init__(
        self,
        max_attempts: int = 5,
        window_seconds: int = 15 * 60,
        block_seconds: int = 30 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self.max_attempts = max_attempts
        self.window = window_seconds
        self.block = block_seconds
        self.clock = clock

        self._records: Dict[str, LoginAttemptRecord] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sweeper: Optional[threading.Thread] = None

    def _expired(self, record: LoginAttemptRecord, now: float) -> bool:
        if record.blocked:
            return record.blocked_until is not None and now >= record.blocked_until
        return now - record.window_start > self.window

    def _live(self, key: str, now: float) -> Optional[LoginAttemptRecord]:
        # вызывающий держит lock
        record = self._records.get(key)
        if record is not None and self._expired(record, now):
            del self._records[key]
            return None
        return record

    def check_admission(self, key: str) -> Admission:
        now = self.clock()
        with self._lock:
            record = self._live(key, now)
            if record is None or not record.blocked:
                return Admission(allowed=True)

            remaining = record.blocked_until - now
            return Admission(allowed=False, retry_after=math.ceil(remaining / 60))

    def record_failure(self, key: str) -> None:
        now = self.clock()
        with self._lock:
            record = self._live(key, now)
            if record is None:
                record = LoginAttemptRecord(key=key, count=0, window_start=now)
                self._records[key] = record
            elif record.blocked:
                return

            record.count += 1

            if record.count >= self.max_attempts:
                record.blocked = True
                record.blocked_until = now + self.block
                sec_logger.warning(
                    f"Login blocked key={key} failures={record.count} "
                    f"for={self.block}s"
                )

    def record_success(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def remaining_attempts(self, key: str) -> int:
        now = self.clock()
        with self._lock:
            record = self._live(key, now)
            if record is None:
                return self.max_attempts
            if record.blocked:
                return 0
            return max(0, self.max_attempts - record.count)

    def get(self, key: str) -> Optional[LoginAttemptRecord]:
        now = self.clock()
        with self._lock:
            record = self._live(key, now)
            return replace(record) if record else None

    def sweep(self) -> int:
        now = self.clock()

        with self._lock:
            snapshot = list(self._records.items())
        stale = [key for key, record in snapshot if self._expired(record, now)]

        removed = 0
        for key in stale:
            with self._lock:
                record = self._records.get(key)
                # запись могла обновиться между снимком и удалением
                if record is not None and self._expired(record, now):
                    del self._records[key]
                    removed += 1

        if removed:
            sec_logger.debug(f"Bruteforce sweep removed={removed}")
        return removed

    def start_sweeper(self, interval_seconds: float = 60) -> None:
        if self._sweeper and self._sweeper.is_alive():
            return

        self._stop.clear()

        def run():
            while not self._stop.wait(interval_seconds):
                self.sweep()

        self._sweeper = threading.Thread(target=run, name="bruteforce-sweeper", daemon=True)
        self._sweeper.start()

    def stop_sweeper(self) -> None:
        self._stop.set()
        if self._sweeper:
            self._sweeper.join(timeout=1)
            self._sweeper = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
