import time
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from organizer.core.bruteforce import BruteForceGuard, client_key
from organizer.core.config import Settings, settings as default_settings
from organizer.core.logging import get_app_logger, get_security_logger
from organizer.core.rate_limit import build_limiters
from organizer.routers.auth import router as auth_router
from organizer.routers.events import router as events_router
from organizer.routers.finance import router as finance_router
from organizer.routers.kanban import router as kanban_router
from organizer.routers.notes import router as notes_router
from organizer.routers.tasks import router as tasks_router

logger = get_app_logger()
sec_logger = get_security_logger()

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}

BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def _validation_message(error: dict) -> str:
    msg = error.get("msg", "Invalid request")
    return msg.removeprefix("Value error, ")


def create_app(settings: Settings | None = None, clock=time.time) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.bruteforce = BruteForceGuard(
        max_attempts=settings.LOGIN_MAX_ATTEMPTS,
        window_seconds=settings.LOGIN_WINDOW_MINUTES * 60,
        block_seconds=settings.LOGIN_BLOCK_MINUTES * 60,
        clock=clock,
    )
    app.state.limiters = build_limiters(settings, clock)

    @app.on_event("startup")
    def on_startup():
        app.state.bruteforce.start_sweeper(settings.LOGIN_SWEEP_INTERVAL_SECONDS)

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.bruteforce.stop_sweeper()

    # ---- middleware (последний добавленный выполняется первым) ----

    @app.middleware("http")
    async def general_rate_limit(request: Request, call_next):
        limiter = app.state.limiters["general"]
        key = client_key(request)
        if not limiter.check(key):
            sec_logger.warning(f"Rate limit hit limiter=general key={key}")
            retry = limiter.retry_after(key)
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests. Please wait a few minutes.", "retryAfter": retry},
                headers={"Retry-After": str(retry * 60)},
            )
        return await call_next(request)

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        too_large = JSONResponse(status_code=413, content={"error": "Request body too large"})
        length = request.headers.get("content-length")
        if length and length.isdigit():
            if int(length) > settings.MAX_BODY_BYTES:
                return too_large
        elif request.method in BODY_METHODS:
            # chunked: заголовка нет, меряем само тело (оно кешируется для роутера)
            if len(await request.body()) > settings.MAX_BODY_BYTES:
                return too_large
        return await call_next(request)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # ---- errors: всегда {"error": ...} ----

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            content = exc.detail
        elif exc.status_code == 404 and exc.detail == "Not Found":
            content = {"error": "Route not found"}
        else:
            content = {"error": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(e.get("loc", ())), "msg": _validation_message(e), "type": e.get("type")}
            for e in exc.errors()
        ]
        first = errors[0]["msg"] if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"error": first, "errors": errors})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        content = {"error": "Internal server error"}
        if settings.DEBUG:
            content["detail"] = repr(exc)
        return JSONResponse(status_code=500, content=content)

    @app.get("/api/health")
    def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    app.include_router(auth_router)
    app.include_router(tasks_router)
    app.include_router(notes_router)
    app.include_router(events_router)
    app.include_router(kanban_router)
    app.include_router(finance_router)

    return app


app = create_app()
