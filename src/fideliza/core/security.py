"""Bearer token handling and the authenticated principal contract."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings


class Role(str, enum.Enum):
    """Operator roles recognised by the core."""

    SUPER_ADMIN = "super_admin"
    STORE_OWNER = "store_owner"


@dataclass(frozen=True)
class Principal:
    """Authenticated operator attached to every store-scoped call."""

    id: str
    role: Role
    store_id: Optional[UUID] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role is Role.SUPER_ADMIN


class InvalidToken(Exception):
    """Raised when a bearer token cannot be trusted."""


def create_access_token(principal: Principal, settings: Settings, *, expires_in: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": principal.id,
        "role": principal.role.value,
        "iss": settings.jwt_issuer,
        "iat": now,
        "exp": now + (expires_in or timedelta(minutes=settings.jwt_expires_minutes)),
    }
    if principal.store_id is not None:
        payload["store_id"] = str(principal.store_id)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> Principal:
    """Verify the token signature and claims and build the principal."""

    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidToken("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidToken("Invalid token") from exc

    try:
        role = Role(claims.get("role"))
        store_id = UUID(claims["store_id"]) if claims.get("store_id") else None
    except (ValueError, TypeError) as exc:
        raise InvalidToken("Malformed principal claims") from exc

    if role is Role.STORE_OWNER and store_id is None:
        raise InvalidToken("Store owner token without store scope")

    return Principal(id=str(claims["sub"]), role=role, store_id=store_id)


_bearer = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: Settings = Depends(get_app_settings),
) -> Principal:
    """FastAPI dependency resolving the caller from the Authorization header."""

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "token_required", "message": "Access token required."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_access_token(credentials.credentials, settings)
    except InvalidToken as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "invalid_token", "message": str(exc)},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
