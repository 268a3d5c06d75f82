"""Error taxonomy for briefing and image generation.

Every error carries a single human-readable ``message`` that is shown to the
user as-is. Service failures are classified from the lower-cased error text
of the underlying exception.
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)


class BriefingError(Exception):
    """Base class for all user-facing briefing failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(BriefingError):
    """Raised when neither topics nor a query were provided."""

    def __init__(self, message: str = "Please select sports or enter a search query.") -> None:
        super().__init__(message)


class CredentialError(BriefingError):
    """Raised when the API key is missing or rejected."""

    def __init__(
        self,
        message: str = (
            "Your Google Gemini API Key is invalid or missing. "
            "Please check your environment configuration."
        ),
    ) -> None:
        super().__init__(message)


class QuotaError(BriefingError):
    """Raised when the service reports an exhausted quota or rate limit."""

    def __init__(
        self,
        message: str = (
            "You have exceeded your API quota. "
            "Please check your Google AI account settings."
        ),
    ) -> None:
        super().__init__(message)


class NetworkError(BriefingError):
    """Raised when the service could not be reached."""

    def __init__(
        self,
        message: str = (
            "Failed to connect to the Gemini API due to a network issue. "
            "Please check your internet connection."
        ),
    ) -> None:
        super().__init__(message)


class EmptyContentError(BriefingError):
    """Raised when the service answered but produced nothing usable."""


class GenericServiceError(BriefingError):
    """Any other service failure, annotated with the operation name."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"An error occurred while generating the {operation}: {detail}")


_CREDENTIAL_MARKERS = ("api key not valid", "api_key_invalid", "api key is missing")
_QUOTA_MARKERS = ("quota", "resource_exhausted")
_NETWORK_MARKERS = ("fetch", "network")


def _error_text(exc: Exception) -> str:
    """Return the text used for classification, including HTTP error bodies."""
    text = str(exc)
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.text
        except httpx.ResponseNotRead:
            body = ""
        if body:
            text = f"{text}\n{body}"
    return text


def classify_service_error(exc: Exception, operation: str) -> BriefingError:
    """Map a transport or service exception onto the error taxonomy."""
    if isinstance(exc, BriefingError):
        return exc

    logger.error("Error during %s: %s", operation, exc)
    text = _error_text(exc)
    lowered = text.lower()

    if any(marker in lowered for marker in _CREDENTIAL_MARKERS):
        return CredentialError()
    if any(marker in lowered for marker in _QUOTA_MARKERS):
        return QuotaError()
    if isinstance(exc, httpx.TransportError) or any(m in lowered for m in _NETWORK_MARKERS):
        return NetworkError()
    return GenericServiceError(operation, str(exc) or type(exc).__name__)
