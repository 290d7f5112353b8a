from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from organizer.core.bruteforce import BruteForceGuard
from organizer.services.provider import SupabaseGateway, get_gateway
from organizer.services.records import RecordService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@dataclass
class CurrentUser:
    id: str
    email: Optional[str]
    name: str
    token: str


def get_guard(request: Request) -> BruteForceGuard:
    return request.app.state.bruteforce


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    gateway: SupabaseGateway = Depends(get_gateway),
) -> CurrentUser:
    if not token:
        raise HTTPException(status_code=401, detail="Authentication token not provided")

    # проверяем формат до похода к провайдеру
    try:
        jwt.get_unverified_claims(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token format")

    user = gateway.get_user(token)
    if not user or not user.get("id"):
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    metadata = user.get("user_metadata") or {}
    return CurrentUser(
        id=user["id"],
        email=user.get("email"),
        name=metadata.get("name") or "",
        token=token,
    )


def get_records(
    current_user: CurrentUser = Depends(get_current_user),
    gateway: SupabaseGateway = Depends(get_gateway),
) -> RecordService:
    return RecordService(gateway, current_user.id, current_user.token)
