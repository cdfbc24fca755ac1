"""
Errors surfaced to callers of the callable (HTTPS) functions.
"""

from typing import Any, Dict, Optional

# Callable error kind -> (wire status, HTTP status)
ERROR_STATUS = {
    "invalid-argument": ("INVALID_ARGUMENT", 400),
    "unknown": ("UNKNOWN", 500),
    "internal": ("INTERNAL", 500),
}


class CallableError(Exception):
    """Error reported to the caller as a structured callable error."""

    kind = "internal"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def status(self) -> str:
        return ERROR_STATUS[self.kind][0]

    @property
    def http_status(self) -> int:
        return ERROR_STATUS[self.kind][1]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the `error` member of a callable response body."""
        error = {"status": self.status, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error


class InvalidArgumentError(CallableError):
    """A required request field is missing or invalid."""

    kind = "invalid-argument"


class UpstreamError(CallableError):
    """
    The Genius search API failed or returned something we cannot read.

    Carries the upstream status code and text when the failure is a
    non-2xx response.
    """

    kind = "unknown"

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
        status_text: Optional[str] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.status_text = status_text
