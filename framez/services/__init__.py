"""Convenience exports for service layer."""
from .auth_service import (
    fetch_profile,
    get_current_session,
    register_user,
    sign_in,
    sign_out,
    validate_email,
    validate_login,
    validate_password,
    validate_registration,
)
from .post_service import (
    aggregate_feed,
    create_post_comment,
    create_post_record,
    list_feed_records,
    list_post_comments,
    list_user_post_records,
    set_post_like_state,
)
from .realtime import ChangeEvent, RealtimeSubscription, TableWatch, apply_change, parse_change_event
from .session_store import AuthSessionBridge, SessionStore, bootstrap_session
from .storage_service import ImageSource, StorageUploadError, upload_post_image

__all__ = [
    "fetch_profile",
    "get_current_session",
    "register_user",
    "sign_in",
    "sign_out",
    "validate_email",
    "validate_login",
    "validate_password",
    "validate_registration",
    "aggregate_feed",
    "create_post_comment",
    "create_post_record",
    "list_feed_records",
    "list_post_comments",
    "list_user_post_records",
    "set_post_like_state",
    "ChangeEvent",
    "RealtimeSubscription",
    "TableWatch",
    "apply_change",
    "parse_change_event",
    "AuthSessionBridge",
    "SessionStore",
    "bootstrap_session",
    "ImageSource",
    "StorageUploadError",
    "upload_post_image",
]
