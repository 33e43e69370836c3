"""Authentication helpers delegating to the Supabase auth API."""
from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from supabase import AsyncClient

from ..constants import MIN_PASSWORD_LENGTH, USERS_TABLE
from ..errors import (
    BackendRequestError,
    InvalidEmailError,
    InvalidPasswordError,
    ValidationError,
    describe_error,
)
from ..schemas import LoginRequest, RegisterRequest, UserProfile
from .post_service import execute_query

logger = logging.getLogger(__name__)


def _raise_for_fields(exc: PydanticValidationError) -> None:
    failed = {str(error["loc"][0]) for error in exc.errors() if error.get("loc")}
    if "email" in failed:
        raise InvalidEmailError() from exc
    if "password" in failed:
        raise InvalidPasswordError(MIN_PASSWORD_LENGTH) from exc
    if "display_name" in failed:
        raise ValidationError("Please enter a display name.", title="Invalid Name") from exc
    raise ValidationError(describe_error(exc)) from exc


def validate_login(email: str, password: str) -> LoginRequest:
    """Return normalised credentials or raise the first failing field's error."""

    try:
        return LoginRequest(email=(email or "").strip(), password=password or "")
    except PydanticValidationError as exc:
        _raise_for_fields(exc)
        raise


def validate_registration(email: str, password: str, display_name: str) -> RegisterRequest:
    try:
        return RegisterRequest(
            email=(email or "").strip(),
            password=password or "",
            display_name=(display_name or "").strip(),
        )
    except PydanticValidationError as exc:
        _raise_for_fields(exc)
        raise


def validate_email(email: str) -> bool:
    try:
        validate_login(email, "x" * MIN_PASSWORD_LENGTH)
    except InvalidEmailError:
        return False
    return True


def validate_password(password: str) -> bool:
    return len(password or "") >= MIN_PASSWORD_LENGTH


async def sign_in(client: AsyncClient, *, email: str, password: str) -> Any:
    """Validate the credentials and open a password session."""

    credentials = validate_login(email, password)
    try:
        return await client.auth.sign_in_with_password(
            {"email": str(credentials.email), "password": credentials.password}
        )
    except Exception as exc:
        logger.warning("Sign-in failed for %s: %s", credentials.email, describe_error(exc))
        raise BackendRequestError("sign in", describe_error(exc)) from exc


async def register_user(client: AsyncClient, *, email: str, password: str, display_name: str) -> Any:
    """Create an auth account; the matching ``users`` row is provisioned by the backend."""

    payload = validate_registration(email, password, display_name)
    try:
        return await client.auth.sign_up(
            {
                "email": str(payload.email),
                "password": payload.password,
                "options": {"data": {"display_name": payload.display_name}},
            }
        )
    except Exception as exc:
        logger.warning("Registration failed for %s: %s", payload.email, describe_error(exc))
        raise BackendRequestError("register", describe_error(exc)) from exc


async def sign_out(client: AsyncClient) -> None:
    try:
        await client.auth.sign_out()
    except Exception as exc:
        logger.exception("Sign-out failed")
        raise BackendRequestError("sign out", describe_error(exc)) from exc


async def get_current_session(client: AsyncClient) -> Any:
    try:
        return await client.auth.get_session()
    except Exception as exc:
        logger.exception("Reading the stored session failed")
        raise BackendRequestError("read session", describe_error(exc)) from exc


async def fetch_profile(client: AsyncClient, user_id: str) -> UserProfile | None:
    """Return the ``users`` row for ``user_id``, or ``None`` when it does not exist yet."""

    rows = await execute_query(
        client.table(USERS_TABLE).select("*").eq("id", user_id).limit(1),
        action="load profile",
    )
    if not rows:
        return None
    return UserProfile.model_validate(rows[0])


__all__ = [
    "validate_login",
    "validate_registration",
    "validate_email",
    "validate_password",
    "sign_in",
    "register_user",
    "sign_out",
    "get_current_session",
    "fetch_profile",
]
