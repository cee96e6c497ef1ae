"""JSON auth endpoints for the web client.

register and login both return { accessToken, user } so the client can keep
the token in memory and go straight to the dashboard.  logout revokes the
presented token until it would have expired.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, field_validator

from coursetrack.api.dependencies import get_repos, get_token_blacklist, require_user
from coursetrack.api.errors import http_error
from coursetrack.models.principal import Principal
from coursetrack.models.user import User
from coursetrack.repos.registry import Repositories
from coursetrack.services import auth_service, token_service
from coursetrack.services.errors import AccountDisabledError, UserAlreadyExistsError
from coursetrack.services.token_blacklist import TokenBlacklist

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(value: str) -> str:
    email = value.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Invalid email address")
    return email


# --- Request / Response schemas -------------------------------------------


class RegisterIn(BaseModel):
    email: str
    password: str = Field(min_length=6)
    firstName: str = Field(min_length=1, max_length=100)
    lastName: str = Field(min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator("firstName", "lastName")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class LoginIn(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        return _normalize_email(value)


class UserOut(BaseModel):
    id: str
    email: str
    firstName: str
    lastName: str
    role: str


class ProfileOut(UserOut):
    createdAt: datetime
    lastLogin: datetime | None


class AuthResponse(BaseModel):
    accessToken: str
    user: UserOut


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=str(user.id),
        email=user.email,
        firstName=user.first_name,
        lastName=user.last_name,
        role=user.role.value,
    )


# --- POST /auth/register --------------------------------------------------


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    payload: RegisterIn,
    repos: Annotated[Repositories, Depends(get_repos)],
) -> AuthResponse:
    try:
        user = await auth_service.register_user(
            repos.users,
            email=payload.email,
            password=payload.password,
            first_name=payload.firstName,
            last_name=payload.lastName,
        )
    except UserAlreadyExistsError as exc:
        raise http_error(exc) from None

    return AuthResponse(
        accessToken=token_service.create_access_token(user),
        user=_user_out(user),
    )


# --- POST /auth/login -----------------------------------------------------


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginIn,
    repos: Annotated[Repositories, Depends(get_repos)],
) -> AuthResponse:
    try:
        user = await auth_service.authenticate_user(
            repos.users, payload.email, payload.password
        )
    except AccountDisabledError as exc:
        logger.warning("Login refused, account disabled  email=%s", payload.email)
        raise http_error(exc) from None

    if user is None:
        logger.warning("Login failed  email=%s", payload.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid email or password"},
        )

    logger.info("Login succeeded  user_id=%s", user.id)
    return AuthResponse(
        accessToken=token_service.create_access_token(user),
        user=_user_out(user),
    )


# --- GET /auth/profile ----------------------------------------------------


@router.get("/profile", response_model=ProfileOut)
async def profile(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repositories, Depends(get_repos)],
) -> ProfileOut:
    user = await repos.users.get_by_id(principal.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "User not found"},
        )
    return ProfileOut(
        **_user_out(user).model_dump(),
        createdAt=user.created_at,
        lastLogin=user.last_login,
    )


# --- POST /auth/logout ----------------------------------------------------


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    principal: Annotated[Principal, Depends(require_user)],
    blacklist: Annotated[TokenBlacklist, Depends(get_token_blacklist)],
) -> Response:
    await blacklist.revoke(principal.jti, principal.expires_at)
    logger.info("Token revoked jti=%s user=%s", principal.jti, principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
