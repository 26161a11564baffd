# app/routers/auth.py
"""Credential exchange: login / register, plus token introspection."""

from fastapi import APIRouter, Depends, status

from app.config import Settings
from app.dependencies import current_claims, get_auth_service, get_settings
from app.schemas.auth import LoginRequest, RegisterRequest
from app.services.auth_service import AuthService

router = APIRouter()


@router.post("/auth/login", summary="Exchange credentials for a bearer token")
def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service),
          settings: Settings = Depends(get_settings)):
    token, user = auth.authenticate(body.identifier, body.password)
    return {
        "success": True,
        "message": "Login successful",
        "data": {"token": token, "expiresIn": f"{settings.TOKEN_TTL_HOURS}h", "user": user.public_dict()},
    }


@router.post("/auth/register", status_code=status.HTTP_201_CREATED, summary="Create an admin account")
def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service),
             settings: Settings = Depends(get_settings)):
    user = auth.register(body.username, body.email, body.password)
    return {
        "success": True,
        "message": "User registered successfully",
        "data": {"token": auth.issue_token(user), "expiresIn": f"{settings.TOKEN_TTL_HOURS}h",
                 "user": user.public_dict()},
    }


@router.get("/auth/me", summary="Claims of the current token")
def me(claims: dict = Depends(current_claims)):
    return {"success": True, "data": claims}
