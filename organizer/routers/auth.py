import html
import re
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, field_validator

from organizer.core.bruteforce import BruteForceGuard, client_key
from organizer.core.deps import CurrentUser, get_current_user, get_guard
from organizer.core.logging import get_security_logger
from organizer.core.rate_limit import RateLimit, too_many_requests
from organizer.services.provider import ProviderError, SupabaseGateway, get_gateway

sec_logger = get_security_logger()

router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"],
    dependencies=[Depends(RateLimit("auth", "Too many authentication attempts. Please wait a few minutes."))],
)

PRINTABLE_ASCII = re.compile(r"^[\x20-\x7E]+$")


def _normalize_email(value: str) -> str:
    try:
        return validate_email(value, check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        raise ValueError("Invalid email")


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not 6 <= len(v) <= 128:
            raise ValueError("Password must be between 6 and 128 characters")
        if not PRINTABLE_ASCII.match(v):
            raise ValueError("Password contains invalid characters")
        return v

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not 2 <= len(v) <= 100:
            raise ValueError("Name must be between 2 and 100 characters")
        return html.escape(v)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class RefreshRequest(BaseModel):
    refreshToken: str

    @field_validator("refreshToken")
    @classmethod
    def check_token(cls, v: str) -> str:
        if not v:
            raise ValueError("Refresh token is required")
        return v


@router.post(
    "/register",
    status_code=201,
    dependencies=[Depends(RateLimit("register", "Too many registrations. Please try again later."))],
)
def register(body: RegisterRequest, gateway: SupabaseGateway = Depends(get_gateway)):
    try:
        result = gateway.sign_up(body.email, body.password, body.name or "")
    except ProviderError as exc:
        raise HTTPException(status_code=400, detail=exc.message)

    sec_logger.info(f"Registered email={body.email}")
    return {"message": "Account created! Check your email.", "user": result["user"]}


@router.post(
    "/login",
    dependencies=[Depends(RateLimit("login", "Too many login attempts. Please wait 15 minutes."))],
)
def login(
    request: Request,
    body: LoginRequest,
    gateway: SupabaseGateway = Depends(get_gateway),
    guard: BruteForceGuard = Depends(get_guard),
):
    key = client_key(request)

    admission = guard.check_admission(key)
    if not admission.allowed:
        sec_logger.warning(f"Bruteforce blocked email={body.email} ip={key}")
        raise too_many_requests(
            f"Too many login attempts. Try again in {admission.retry_after} minute(s).",
            admission.retry_after,
            blocked=True,
        )

    try:
        result = gateway.sign_in(body.email, body.password)
    except ProviderError as exc:
        guard.record_failure(key)
        remaining = guard.remaining_attempts(key)
        sec_logger.warning(f"Login failed email={body.email} ip={key} remaining={remaining}")
        raise HTTPException(
            status_code=401,
            detail={"error": exc.message, "remainingAttempts": remaining},
        )

    guard.record_success(key)
    # успешные входы не расходуют лимит
    request.app.state.limiters["login"].release(key)
    sec_logger.info(f"Login success email={body.email} ip={key}")
    return result


@router.post("/logout")
def logout(
    current_user: CurrentUser = Depends(get_current_user),
    gateway: SupabaseGateway = Depends(get_gateway),
):
    try:
        gateway.sign_out(current_user.token)
    except ProviderError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    return {"message": "Logged out successfully"}


@router.get("/me")
def me(current_user: CurrentUser = Depends(get_current_user)):
    return {"id": current_user.id, "email": current_user.email, "name": current_user.name}


@router.post("/refresh")
def refresh(body: RefreshRequest, gateway: SupabaseGateway = Depends(get_gateway)):
    try:
        return gateway.refresh(body.refreshToken)
    except ProviderError:
        raise HTTPException(status_code=401, detail="Invalid token")
