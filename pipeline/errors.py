"""
Pipeline Errors
===============
Errors raised by the rewrite core.

All of them are terminal for the current request: nothing here is
retried. The HTTP layer decides status codes and messages.
"""

from typing import Any, List, Optional


class PipelineError(Exception):
    """Base class for rewrite pipeline errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequest(PipelineError):
    """The rewrite request failed validation."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []


class OracleError(PipelineError):
    """Base class for failures of the text-rewriting oracle."""
    pass


class OracleAuthFailure(OracleError):
    """Missing or rejected oracle credential."""
    pass


class OracleQuotaExceeded(OracleError):
    """The oracle account ran out of quota."""
    pass


class OracleRateLimited(OracleError):
    """The oracle throttled the request."""
    pass


class OracleFailure(OracleError):
    """Any other oracle error, including a malformed response."""
    pass


def classify_oracle_error(exc: Exception) -> OracleError:
    """
    Map an exception raised by an LLM client to an oracle error.

    Client libraries disagree on exception types, so this looks at the
    HTTP status when one is attached and falls back to the message.
    """
    if isinstance(exc, OracleError):
        return exc

    message = str(exc)
    lowered = message.lower()
    status_code = getattr(exc, "status_code", None)
    if status_code is None:
        status_code = getattr(getattr(exc, "response", None), "status_code", None)

    if status_code in (401, 403) or "api key" in lowered or "api_key" in lowered:
        return OracleAuthFailure(
            "Invalid or missing API key. Please check your API configuration."
        )
    # Quota errors also come back as 429, so check them first
    if "quota" in lowered:
        return OracleQuotaExceeded(
            "API quota exceeded. Please try again later or upgrade your plan."
        )
    if status_code == 429 or "rate limit" in lowered:
        return OracleRateLimited(
            "Rate limit exceeded. Please wait before making another request."
        )
    return OracleFailure(f"Paraphrasing failed: {message}")
