"""AdsDesk — Graph API Error Taxonomy & Classifier."""

from typing import Any, Mapping

TOKEN_EXPIRED_CODE = 190
AUTH_EXCEPTION_TYPE = "OAuthException"
EXPIRED_MESSAGE_MARKERS = ("Session has expired", "expired")


class GraphAPIError(Exception):
    """Raised when the Graph API call fails (rate limit, permissions, bad request...)."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        error_code: int = 0,
        error_type: str = "",
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.error_type = error_type
        super().__init__(message)


class TokenExpiredError(GraphAPIError):
    """The upstream rejected the access token; the user must re-authenticate."""


class MalformedInputError(ValueError):
    """A required parameter was missing; no upstream call was made."""


def _error_envelope(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        return {}
    error = payload.get("error", payload)
    if isinstance(error, Mapping):
        return error
    if isinstance(error, str):
        return {"message": error}
    return {}


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def is_token_expired(message: str, code: int, error_type: str) -> bool:
    """Any one of message text, error code, or error type is sufficient."""
    if message and any(marker in message for marker in EXPIRED_MESSAGE_MARKERS):
        return True
    return code == TOKEN_EXPIRED_CODE or error_type == AUTH_EXCEPTION_TYPE


def classify_error(
    payload: Any, fallback_message: str = "", status_code: int = 0
) -> GraphAPIError:
    """Build the exception matching a failed call's error payload.

    The envelope varies: ``{"error": {...}}``, ``{"error": "..."}``, a bare
    error object, or nothing at all (transport failures).
    """
    error = _error_envelope(payload)
    message = str(error.get("message") or fallback_message or "Unknown Graph API error")
    code = _as_int(error.get("code"))
    error_type = str(error.get("type") or "")

    if is_token_expired(message, code, error_type):
        return TokenExpiredError(message, status_code, code, error_type)
    return GraphAPIError(message, status_code, code, error_type)
