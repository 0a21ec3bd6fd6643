"""
Exceptions for the maps module.

Every failure that leaves the request core is a MapsApiError carrying a
stable kind, a human readable message and a diagnostic context mapping.
"""

from typing import Any, Dict, Optional


# Kinds produced by the core itself; upstream status strings are used as-is
REQUEST_FAILED = "REQUEST_FAILED"
GEOCODE_FAILED = "GEOCODE_FAILED"
INVALID_IP = "INVALID_IP"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"


def http_kind(status_code: int) -> str:
    """Kind for a non-2xx response that carried no upstream status."""
    return f"HTTP_{status_code}"


class MapsApiError(Exception):
    """
    Normalized error raised by the maps core.

    Attributes:
        kind: Stable error code (upstream status or a core sentinel)
        message: Human readable description
        context: Diagnostic key/value pairs (endpoint, HTTP status, ...)
        retryable: Whether the executor may retry the request
        retry_after: Provider-directed delay in seconds, if any
    """

    def __init__(self,
                 kind: str,
                 message: str,
                 context: Optional[Dict[str, Any]] = None,
                 retryable: bool = False,
                 retry_after: Optional[float] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context = dict(context or {})
        self.retryable = retryable
        self.retry_after = retry_after

    def to_dict(self) -> Dict[str, Any]:
        """Render the error in the shape handed to the outer dispatcher."""
        return {
            "code": self.kind,
            "message": self.message,
            "context": dict(self.context),
        }

    def __repr__(self) -> str:
        return f"MapsApiError(kind={self.kind!r}, message={self.message!r})"


class ResourceNotFoundError(MapsApiError):
    """Raised when a static reference resource URI is unknown."""

    def __init__(self, uri: str):
        super().__init__(
            RESOURCE_NOT_FOUND,
            f"Resource not found: {uri}",
            {"uri": uri},
        )
