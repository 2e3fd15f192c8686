"""Generative model integration: client, prompts, parsing and error mapping."""

from app.services.ai.client import GeminiClient, ModelClient, build_model_client
from app.services.ai.errors import (
    AuthenticationError,
    CaseContentError,
    ClassifiedError,
    InvalidShape,
    MissingFieldsError,
    ModelClientConfigError,
    NetworkError,
    ProviderError,
    QuotaExceededError,
    RateLimitedError,
    ResponseParseError,
    UnparsableResponse,
    classify_error,
    provider_error_from_message,
)
from app.services.ai.parsing import parse_json_response, strip_code_fence
from app.services.ai.summary import CaseSummary, fallback_summary, generate_case_summary
from app.services.ai.time_context import TimeContext, get_time_context

__all__ = [
    "AuthenticationError",
    "CaseContentError",
    "CaseSummary",
    "ClassifiedError",
    "GeminiClient",
    "InvalidShape",
    "MissingFieldsError",
    "ModelClient",
    "ModelClientConfigError",
    "NetworkError",
    "ProviderError",
    "QuotaExceededError",
    "RateLimitedError",
    "ResponseParseError",
    "TimeContext",
    "UnparsableResponse",
    "build_model_client",
    "classify_error",
    "fallback_summary",
    "generate_case_summary",
    "get_time_context",
    "parse_json_response",
    "provider_error_from_message",
    "strip_code_fence",
]
