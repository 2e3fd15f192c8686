"""Error types for the model pipeline and their mapping to HTTP responses.

Provider failures are tagged once, at the model client boundary, by
``provider_error_from_message``. Everything else that reaches a request
handler goes through ``classify_error``, which falls back to the same
substring table for errors that were never tagged.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

QUOTA_EXCEEDED_MESSAGE = (
    "QUOTA_EXCEEDED: You have exceeded your daily quota. Please try again tomorrow."
)
AUTH_FAILURE_MESSAGE = "API authentication failed. Please check your API key configuration."
RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please wait a moment and try again."
NETWORK_FAILURE_MESSAGE = (
    "Network error. Please check your internet connection and try again."
)
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
PERSISTENCE_ERROR_MESSAGE = "A database error occurred. Please try again."


@dataclass(frozen=True)
class ClassifiedError:
    """Outward-facing status and message for a failure."""

    status_code: int
    message: str
    kind: str

    def to_body(self) -> dict[str, str]:
        return {"error": self.message}


class ModelClientConfigError(RuntimeError):
    """Raised when the model client cannot be constructed."""


class ProviderError(Exception):
    """Failure reported by the generative model provider."""

    kind = "unknown"

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.provider_status = status_code


class QuotaExceededError(ProviderError):
    kind = "quota_exceeded"


class AuthenticationError(ProviderError):
    kind = "auth_failure"


class RateLimitedError(ProviderError):
    kind = "rate_limited"


class NetworkError(ProviderError):
    kind = "network_failure"


class ResponseParseError(ValueError):
    """Model output could not be recovered as structured data."""

    def __init__(self, message: str, *, context: str, raw_text: str, attempted: str):
        super().__init__(message)
        self.message = message
        self.context = context
        self.raw_text = raw_text
        self.attempted = attempted


class UnparsableResponse(ResponseParseError):
    pass


class InvalidShape(ResponseParseError):
    pass


# Evaluated in order; the first rule whose needle occurs wins. Quota errors
# often carry "429" too, so quota must stay ahead of rate limiting.
_RULES: tuple[tuple[tuple[str, ...], type[ProviderError], int, str], ...] = (
    (("quota", "quota_exceeded"), QuotaExceededError, 429, QUOTA_EXCEEDED_MESSAGE),
    (("api key", "authentication", "403"), AuthenticationError, 401, AUTH_FAILURE_MESSAGE),
    (("rate limit", "429"), RateLimitedError, 429, RATE_LIMITED_MESSAGE),
    (("fetch", "network", "enotfound"), NetworkError, 503, NETWORK_FAILURE_MESSAGE),
)

_BY_KIND = {error_cls.kind: (status, message) for _, error_cls, status, message in _RULES}


def _match_rule(message: str):
    lowered = message.lower()
    for needles, error_cls, status, outward in _RULES:
        if any(needle in lowered for needle in needles):
            return error_cls, status, outward
    return None


def provider_error_from_message(
    message: str, *, status_code: int | None = None
) -> ProviderError:
    """Tag a raw provider error message with the matching error type."""
    matched = _match_rule(message)
    error_cls = matched[0] if matched else ProviderError
    return error_cls(message, status_code=status_code)


def classify_error(error: BaseException) -> ClassifiedError:
    """Map any failure to the status and message returned to the client."""
    if isinstance(error, ProviderError) and error.kind in _BY_KIND:
        status, message = _BY_KIND[error.kind]
        return ClassifiedError(status, message, error.kind)

    if isinstance(error, ResponseParseError):
        return ClassifiedError(500, error.message, "invalid_response")

    if isinstance(error, SQLAlchemyError):
        return ClassifiedError(500, PERSISTENCE_ERROR_MESSAGE, "persistence")

    text = str(error)
    matched = _match_rule(text)
    if matched:
        error_cls, status, message = matched
        return ClassifiedError(status, message, error_cls.kind)
    return ClassifiedError(500, text or UNEXPECTED_ERROR_MESSAGE, "unknown")


class CaseContentError(Exception):
    """Practice-case input or output rejected by the content checks."""

    def __init__(self, message: str, *, suggestion: str | None = None, status_code: int = 422):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.status_code = status_code

    def to_body(self) -> dict[str, str]:
        body = {"error": self.message}
        if self.suggestion:
            body["suggestion"] = self.suggestion
        return body


class MissingFieldsError(InvalidShape):
    """Parsed model output lacks keys the caller depends on."""
