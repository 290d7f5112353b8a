import math
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from fastapi import HTTPException, Request

from organizer.core.bruteforce import client_key
from organizer.core.logging import get_security_logger

sec_logger = get_security_logger()


class RateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self.storage: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _prune(self, q: Deque[float], now: float) -> None:
        # очищаем старые запросы
        while q and q[0] <= now - self.window_seconds:
            q.popleft()

    def _sweep(self, now: float) -> int:
        # вызывающий держит lock
        stale = []
        for key, q in self.storage.items():
            self._prune(q, now)
            if not q:
                stale.append(key)
        for key in stale:
            del self.storage[key]
        self._last_sweep = now
        return len(stale)

    def sweep(self) -> int:
        """Удалить ключи без запросов в текущем окне."""
        now = self.clock()
        with self._lock:
            return self._sweep(now)

    def check(self, key: str) -> bool:
        """
        True = можно
        False = лимит превышен
        """
        now = self.clock()
        with self._lock:
            # раз за окно выбрасываем ключи без запросов
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)

            q = self.storage.setdefault(key, deque())
            self._prune(q, now)

            if len(q) >= self.max_requests:
                return False

            q.append(now)
            return True

    def release(self, key: str) -> None:
        """Не считать последний запрос (например, успешный вход)."""
        with self._lock:
            q = self.storage.get(key)
            if q:
                q.pop()
            if q is not None and not q:
                del self.storage[key]

    def retry_after(self, key: str) -> int:
        """Минуты до освобождения ближайшего слота."""
        now = self.clock()
        with self._lock:
            q = self.storage.get(key)
            if not q:
                return 0
            return max(1, math.ceil((q[0] + self.window_seconds - now) / 60))

    def reset(self) -> None:
        with self._lock:
            self.storage.clear()


class RateLimit:
    """Зависимость: проверяет лимитер app.state.limiters[name]."""

    def __init__(self, name: str, message: str):
        self.name = name
        self.message = message

    def __call__(self, request: Request) -> None:
        limiter: RateLimiter = request.app.state.limiters[self.name]
        key = client_key(request)
        if not limiter.check(key):
            sec_logger.warning(f"Rate limit hit limiter={self.name} key={key}")
            raise too_many_requests(self.message, limiter.retry_after(key))


def too_many_requests(message: str, retry_after: int, **extra) -> HTTPException:
    return HTTPException(
        status_code=429,
        detail={"error": message, "retryAfter": retry_after, **extra},
        headers={"Retry-After": str(retry_after * 60)},
    )


def build_limiters(settings, clock: Callable[[], float] = time.time) -> Dict[str, RateLimiter]:
    return {
        "general": RateLimiter(
            settings.GENERAL_RATE_LIMIT, settings.GENERAL_RATE_WINDOW_MINUTES * 60, clock
        ),
        "auth": RateLimiter(
            settings.AUTH_RATE_LIMIT, settings.AUTH_RATE_WINDOW_MINUTES * 60, clock
        ),
        "login": RateLimiter(
            settings.LOGIN_RATE_LIMIT, settings.LOGIN_RATE_WINDOW_MINUTES * 60, clock
        ),
        "register": RateLimiter(
            settings.REGISTER_RATE_LIMIT, settings.REGISTER_RATE_WINDOW_MINUTES * 60, clock
        ),
    }
