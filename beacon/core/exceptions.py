"""Custom exception classes for the Beacon policy service.

Includes:
- Base exception carrying an HTTP status and error code
- Client and authentication errors surfaced to the caller
- Upstream errors (store, completion backend) that are recovered locally
"""

from datetime import UTC, datetime


class BeaconException(Exception):
    """Base exception for all Beacon errors."""

    def __init__(
        self, detail: str, status_code: int = 500, error_code: str = "INTERNAL_ERROR"
    ):
        self.detail = detail
        self.status_code = status_code
        self.error_code = error_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)

    def to_dict(self):
        """Convert exception to dictionary for API response."""
        return {
            "error": self.error_code,
            "detail": self.detail,
            "status_code": self.status_code,
            "timestamp": self.timestamp,
        }


class MissingCredentialsError(BeaconException):
    """Raised when the request carries no URL or no API key."""

    def __init__(self, detail: str = "Missing URL or API Key"):
        super().__init__(
            detail=detail, status_code=400, error_code="MISSING_CREDENTIALS"
        )


class InvalidApiKeyError(BeaconException):
    """Raised when an API key does not resolve to a rule record."""

    def __init__(self, detail: str = "Invalid API Key"):
        super().__init__(detail=detail, status_code=401, error_code="INVALID_API_KEY")


class DecisionPipelineError(BeaconException):
    """Raised when the pipeline fails after credentials were accepted.

    The verdict has already been recorded as BLOCK; the caller only sees a
    generic internal error.
    """

    def __init__(self, original_error: Exception | None = None):
        super().__init__(
            detail="Internal Server Error", status_code=500, error_code="INTERNAL_ERROR"
        )
        self.original_error = original_error


class ConfigurationError(BeaconException):
    """Raised when settings cannot produce a working component."""

    def __init__(self, detail: str):
        super().__init__(
            detail=f"Configuration error: {detail}",
            status_code=500,
            error_code="CONFIGURATION_ERROR",
        )


# =============================================================================
# UPSTREAM EXCEPTIONS (never surfaced to the caller as-is)
# =============================================================================


class UpstreamError(BeaconException):
    """Base exception for failures of external collaborators."""

    def __init__(self, detail: str, service: str = "unknown"):
        super().__init__(
            detail=detail, status_code=500, error_code=f"{service.upper()}_ERROR"
        )
        self.service = service


class StoreError(UpstreamError):
    """Rule or audit store unreachable or erroring."""

    def __init__(self, detail: str):
        super().__init__(detail=f"Store error: {detail}", service="store")


class CompletionError(UpstreamError):
    """Completion backend unreachable, erroring or returning garbage."""

    def __init__(self, detail: str):
        super().__init__(detail=f"Completion error: {detail}", service="completion")


class CompletionTimeoutError(CompletionError):
    """Completion backend did not answer within the configured timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"timed out after {timeout}s")
        self.timeout = timeout
