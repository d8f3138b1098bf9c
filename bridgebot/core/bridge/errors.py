"""
Error Classification

Error types raised by the bridge quote pipeline. Parse and validation errors
are recovered locally as usage hints, provider errors are isolated per
provider, and token errors fail closed.
"""

from enum import Enum
from typing import Optional

import httpx


class ErrorCategory(str, Enum):
    """Categories of bridge pipeline errors."""

    PARSE = "parse"                          # Command text did not match
    VALIDATION = "validation"                # Unknown chain/token or bad amount
    PROVIDER = "provider"                    # Provider network/API failure
    ROUTE_UNSUPPORTED = "route_unsupported"  # Provider does not serve the pair
    TOKEN_DECODE = "token_decode"            # Malformed callback payload
    TOKEN_ENCODE = "token_encode"            # Callback payload over budget


class BridgeError(Exception):
    """Base class for bridge quote errors."""

    category: ErrorCategory = ErrorCategory.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(BridgeError):
    """Command text is not a bridge request."""

    category = ErrorCategory.PARSE


class ValidationError(BridgeError):
    """Command matched but names an unsupported chain, token or amount."""

    category = ErrorCategory.VALIDATION


class ProviderError(BridgeError):
    """A provider call failed or returned an unusable response."""

    category = ErrorCategory.PROVIDER

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class RouteUnsupportedError(ProviderError):
    """Provider does not serve this chain/token pair."""

    category = ErrorCategory.ROUTE_UNSUPPORTED

    def __init__(self, provider: str, message: str = "Route not supported"):
        super().__init__(provider, message)


class TokenDecodeError(BridgeError):
    """Callback payload failed tag, arity or field validation."""

    category = ErrorCategory.TOKEN_DECODE


class TokenEncodeError(BridgeError):
    """Action could not be encoded within the transport payload limit."""

    category = ErrorCategory.TOKEN_ENCODE


def describe_provider_error(error: BaseException) -> str:
    """Short, user-presentable description of an adapter failure."""

    if isinstance(error, BridgeError):
        return error.message
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code
        detail = ""
        try:
            detail = (error.response.text or "").strip()
        except Exception:
            detail = ""
        preview = detail[:120] if detail else error.response.reason_phrase
        return f"HTTP {status_code}: {preview}"
    if isinstance(error, httpx.TimeoutException):
        return "Request timed out"
    if isinstance(error, httpx.RequestError):
        return f"Network error: {error.__class__.__name__}"
    message = str(error).strip()
    return message or error.__class__.__name__
