# app/dependencies.py
"""FastAPI dependencies shared by the routers: settings, auth gate, client address."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import Settings
from app.exceptions import ForbiddenError
from app.services.auth_service import AuthService

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


def client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop if present, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    auth: AuthService = Depends(get_auth_service),
) -> dict:
    """Any valid token."""
    return auth.verify(credentials.credentials if credentials else None)


def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[dict]:
    """
    Gate for analytics routes. No-op when AUTH_REQUIRED is off; otherwise the
    token must verify and carry an admin-capable role.
    """
    if not get_settings(request).AUTH_REQUIRED:
        return None
    auth = get_auth_service(request)
    claims = auth.verify(credentials.credentials if credentials else None)
    if not auth.is_admin(claims):
        raise ForbiddenError("Admin access required")
    return claims
