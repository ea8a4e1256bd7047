"""Translate heterogeneous backend failures into user-facing messages"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import httpx

import i18n
from .errors import TransportError

logger = logging.getLogger(__name__)

NETWORK_ERROR_NAMES = ("AuthRetryableFetchError",)
NETWORK_MESSAGE_MARKERS = ("Failed to fetch", "Connection failed")

RATE_LIMIT_CODES = ("over_email_send_rate_limit",)
INVALID_CREDENTIALS_CODE = "invalid_credentials"
INVALID_CREDENTIALS_MESSAGE = "Invalid login credentials"
INSUFFICIENT_PERMISSIONS_CODE = "PGRST301"
UNIQUE_VIOLATION_CODE = "23505"
FOREIGN_KEY_VIOLATION_CODE = "23503"


class ErrorCategory(str, Enum):
    CONNECTIVITY = "connectivity"
    RATE_LIMITED = "rate_limited"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class UserMessage:
    """Classified failure ready to show to the player"""
    category: ErrorCategory
    message: str


def _field(error: Any, name: str) -> Optional[Any]:
    """Read a field from an exception attribute or a mapping key"""
    if isinstance(error, Mapping):
        return error.get(name)
    return getattr(error, name, None)


def _message_of(error: Any) -> Optional[str]:
    message = _field(error, "message")
    if message:
        return str(message)
    if isinstance(error, BaseException) and str(error):
        return str(error)
    return None


def _is_network_error(error: Any, message: Optional[str]) -> bool:
    if isinstance(error, (TransportError, httpx.TransportError, asyncio.TimeoutError, TimeoutError)):
        return True
    name = _field(error, "name") or (type(error).__name__ if isinstance(error, BaseException) else None)
    if name in NETWORK_ERROR_NAMES:
        return True
    return bool(message) and any(marker in message for marker in NETWORK_MESSAGE_MARKERS)


def classify_error(error: Any) -> UserMessage:
    """
    Map a backend, transport or validation failure to a stable category and message.

    Network-class conditions are checked before any backend code, since a
    failed connection may carry no code at all.

    Args:
        error: An exception or a mapping with code/message/name fields

    Returns:
        UserMessage with the category and a localized message
    """
    logger.error(f"Backend error: {error!r}")

    message = _message_of(error)
    code = _field(error, "code")
    status = _field(error, "status")

    if _is_network_error(error, message):
        return UserMessage(ErrorCategory.CONNECTIVITY, i18n.get("errors.connectivity"))

    if code in RATE_LIMIT_CODES or status == 429:
        return UserMessage(ErrorCategory.RATE_LIMITED, i18n.get("errors.rate_limited"))

    if code == INVALID_CREDENTIALS_CODE or message == INVALID_CREDENTIALS_MESSAGE:
        return UserMessage(ErrorCategory.AUTHENTICATION, i18n.get("errors.invalid_credentials"))

    if code == INSUFFICIENT_PERMISSIONS_CODE:
        return UserMessage(ErrorCategory.PERMISSION, i18n.get("errors.insufficient_permissions"))

    if code == UNIQUE_VIOLATION_CODE:
        return UserMessage(ErrorCategory.ALREADY_EXISTS, i18n.get("errors.already_exists"))

    if code == FOREIGN_KEY_VIOLATION_CODE:
        return UserMessage(ErrorCategory.NOT_FOUND, i18n.get("errors.referenced_not_found"))

    return UserMessage(ErrorCategory.UNEXPECTED, message or i18n.get("errors.unexpected"))
