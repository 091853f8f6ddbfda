from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Classification for error logging."""

    INPUT = "input"
    STORAGE = "storage"
    INTERNAL = "internal"


class YaadRakhnaError(Exception):
    """Base class for errors raised by this package."""

    category = ErrorCategory.INTERNAL


class DurableStoreUnavailable(YaadRakhnaError):
    """The durable tier could not be read or written."""

    category = ErrorCategory.STORAGE


class MalformedEvent(YaadRakhnaError):
    """An inbound envelope could not be turned into a turn event."""

    category = ErrorCategory.INPUT
