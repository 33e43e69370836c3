"""Exception types shared by services and screens."""
from __future__ import annotations


class ValidationError(ValueError):
    """Raised for user input rejected before any backend request is issued."""

    title = "Invalid Input"

    def __init__(self, message: str, *, title: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title


class EmptyPostError(ValidationError):
    title = "Empty Post"

    def __init__(self) -> None:
        super().__init__("Please add some content or an image.")


class InvalidEmailError(ValidationError):
    title = "Invalid Email"

    def __init__(self) -> None:
        super().__init__("Please enter a valid email address.")


class InvalidPasswordError(ValidationError):
    title = "Invalid Password"

    def __init__(self, min_length: int) -> None:
        super().__init__(f"Password must be at least {min_length} characters.")


class BackendRequestError(RuntimeError):
    """Raised when a query, storage, auth or realtime call to the backend fails."""

    def __init__(self, action: str, message: str) -> None:
        super().__init__(f"{action}: {message}")
        self.action = action
        self.message = message


def describe_error(exc: BaseException) -> str:
    """Return the most user-facing message carried by ``exc``."""

    message = getattr(exc, "message", None)
    if isinstance(message, str) and message.strip():
        return message.strip()
    text = str(exc).strip()
    return text or exc.__class__.__name__


__all__ = [
    "ValidationError",
    "EmptyPostError",
    "InvalidEmailError",
    "InvalidPasswordError",
    "BackendRequestError",
    "describe_error",
]
