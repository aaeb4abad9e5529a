"""Error taxonomy for generation service failures.

Every failure coming back from a remote call is classified into one of six
kinds. Auth and Parsing failures are terminal; the rest are retried.

Usage:
    try:
        await service.generate_text(request)
    except Exception as e:
        error = classify_error(e, "generate_persona")
        if not error.retryable:
            raise error from e
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum

import httpx


class ErrorKind(str, Enum):
    """Classified failure kinds."""

    QUOTA = "quota"
    AUTH = "auth"
    NETWORK = "network"
    TIMEOUT = "timeout"
    PARSING = "parsing"
    GENERIC = "generic"


class GenerationError(Exception):
    """Base class for classified generation failures.

    Attributes:
        operation: Name of the operation that failed.
        original_error: Underlying exception, when one exists.
    """

    kind: ErrorKind = ErrorKind.GENERIC
    retryable: bool = True

    def __init__(
        self,
        message: str,
        operation: str = "unknown",
        original_error: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.original_error = original_error

    def __str__(self) -> str:
        return self.message


class QuotaError(GenerationError):
    """Quota exhausted or rate limited."""

    kind = ErrorKind.QUOTA

    def __init__(self, operation: str = "unknown", original_error: BaseException | None = None):
        super().__init__(
            "API quota exceeded. Please try again later or check your API key limits.",
            operation,
            original_error,
        )


class AuthError(GenerationError):
    """Credentials rejected. Retrying cannot help."""

    kind = ErrorKind.AUTH
    retryable = False

    def __init__(self, operation: str = "unknown", original_error: BaseException | None = None):
        super().__init__(
            "Authentication failed. Please check your API key configuration.",
            operation,
            original_error,
        )


class NetworkError(GenerationError):
    """Connection level failure."""

    kind = ErrorKind.NETWORK

    def __init__(self, operation: str = "unknown", original_error: BaseException | None = None):
        super().__init__(
            "Network connection failed. Please check your internet connection.",
            operation,
            original_error,
        )


class GenerationTimeoutError(GenerationError):
    """Deadline exceeded."""

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        operation: str = "unknown",
        timeout_ms: int = 0,
        original_error: BaseException | None = None,
    ):
        super().__init__(
            f"Operation timed out after {timeout_ms / 1000:g}s. "
            "The request took too long to complete.",
            operation,
            original_error,
        )
        self.timeout_ms = timeout_ms


class ParsingError(GenerationError):
    """Response had an unexpected shape. Retrying cannot help."""

    kind = ErrorKind.PARSING
    retryable = False

    def __init__(
        self,
        operation: str = "unknown",
        original_error: BaseException | None = None,
        detail: str | None = None,
    ):
        super().__init__(
            "Failed to parse API response. The data format was unexpected.",
            operation,
            original_error,
        )
        self.detail = detail


_QUOTA_TOKENS = ("quota", "rate limit", "resource_exhausted", "429")
_AUTH_TOKENS = ("api key", "api_key", "unauthorized", "forbidden", "permission_denied", "401", "403")
_NETWORK_TOKENS = ("network", "fetch", "connection", "econnrefused")
_PARSING_TOKENS = ("json", "parse")


def classify_error(error: BaseException, operation: str = "unknown") -> GenerationError:
    """Classify an arbitrary exception.

    Already classified errors pass through unchanged. Classification is
    heuristic: it looks at the status code when the client exposes one, then
    at substrings of the message.

    Args:
        error: Exception raised by a remote call.
        operation: Name of the operation, carried on the result.

    Returns:
        A GenerationError subclass instance.
    """
    if isinstance(error, GenerationError):
        return error

    message = f"{type(error).__name__}: {error}".lower()
    status = getattr(error, "code", None) or getattr(error, "status_code", None)

    if status == 429 or any(token in message for token in _QUOTA_TOKENS):
        return QuotaError(operation, error)

    if status in (401, 403) or any(token in message for token in _AUTH_TOKENS):
        return AuthError(operation, error)

    if isinstance(error, (ConnectionError, httpx.TransportError)) and not isinstance(
        error, httpx.TimeoutException
    ):
        return NetworkError(operation, error)
    if any(token in message for token in _NETWORK_TOKENS):
        return NetworkError(operation, error)

    if isinstance(error, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return GenerationTimeoutError(operation, 0, error)

    if isinstance(error, json.JSONDecodeError) or any(token in message for token in _PARSING_TOKENS):
        return ParsingError(operation, error)

    return GenerationError(f"{operation} failed: {error}", operation, error)
