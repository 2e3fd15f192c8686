import pytest
from sqlalchemy.exc import OperationalError

from app.services.ai.errors import (
    AUTH_FAILURE_MESSAGE,
    NETWORK_FAILURE_MESSAGE,
    PERSISTENCE_ERROR_MESSAGE,
    QUOTA_EXCEEDED_MESSAGE,
    RATE_LIMITED_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    AuthenticationError,
    CaseContentError,
    NetworkError,
    ProviderError,
    QuotaExceededError,
    RateLimitedError,
    UnparsableResponse,
    classify_error,
    provider_error_from_message,
)


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("429 RESOURCE_EXHAUSTED: quota exceeded for metric", QuotaExceededError),
        ("API key not valid. Please pass a valid API key.", AuthenticationError),
        ("403 Forbidden", AuthenticationError),
        ("429 Too Many Requests", RateLimitedError),
        ("fetch failed: getaddrinfo ENOTFOUND", NetworkError),
    ],
)
def test_provider_errors_are_tagged_by_message(message, expected):
    error = provider_error_from_message(message, status_code=400)

    assert type(error) is expected
    assert error.message == message
    assert error.provider_status == 400


def test_untagged_provider_message_stays_generic():
    error = provider_error_from_message("500 Internal error")

    assert type(error) is ProviderError
    assert error.kind == "unknown"


def test_quota_outranks_rate_limit():
    error = provider_error_from_message("429: quota exceeded, rate limit hit")

    assert isinstance(error, QuotaExceededError)


@pytest.mark.parametrize(
    ("error", "status", "message"),
    [
        (QuotaExceededError("quota"), 429, QUOTA_EXCEEDED_MESSAGE),
        (AuthenticationError("bad key"), 401, AUTH_FAILURE_MESSAGE),
        (RateLimitedError("slow down"), 429, RATE_LIMITED_MESSAGE),
        (NetworkError("timeout"), 503, NETWORK_FAILURE_MESSAGE),
    ],
)
def test_classify_tagged_provider_errors(error, status, message):
    classified = classify_error(error)

    assert classified.status_code == status
    assert classified.to_body() == {"error": message}


def test_classify_untagged_exception_by_text():
    classified = classify_error(Exception("403 authentication failed"))

    assert classified.status_code == 401
    assert classified.message == AUTH_FAILURE_MESSAGE
    assert classified.kind == "auth_failure"


def test_classify_parse_error_keeps_its_message():
    error = UnparsableResponse(
        "The AI returned malformed JSON for feedback. Please try again.",
        context="feedback",
        raw_text="{",
        attempted="{",
    )

    classified = classify_error(error)

    assert classified.status_code == 500
    assert classified.message == error.message


def test_classify_database_error():
    classified = classify_error(OperationalError("SELECT 1", {}, Exception("down")))

    assert classified.status_code == 500
    assert classified.message == PERSISTENCE_ERROR_MESSAGE


def test_classify_unknown_errors_fall_back_to_500():
    assert classify_error(ProviderError("AI response was empty")).to_body() == {
        "error": "AI response was empty"
    }
    assert classify_error(RuntimeError("")).message == UNEXPECTED_ERROR_MESSAGE


def test_case_content_error_body():
    with_suggestion = CaseContentError("Missing medical content", suggestion="Add symptoms")
    without = CaseContentError("Generated case is missing required information")

    assert with_suggestion.status_code == 422
    assert with_suggestion.to_body() == {
        "error": "Missing medical content",
        "suggestion": "Add symptoms",
    }
    assert without.to_body() == {"error": "Generated case is missing required information"}
