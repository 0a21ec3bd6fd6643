"""
Failure classification for the request core.

Transport exceptions, non-2xx HTTP responses and upstream logical status
failures all converge here into a single MapsApiError shape.
"""

from typing import Any, Dict, Optional

import requests

from .maps_errors import MapsApiError, REQUEST_FAILED, http_kind


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Retry-After in seconds; HTTP-date and garbage values are ignored."""
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _upstream_status(body: Any) -> Dict[str, Any]:
    """
    Pull the upstream status and message out of an error body.

    Legacy web services answer {"status": ..., "error_message": ...};
    the newer APIs answer {"error": {"code": ..., "status": ..., "message": ...}}.
    """
    if not isinstance(body, dict):
        return {}

    error = body.get("error")
    if isinstance(error, dict):
        return {
            "api_status": error.get("status"),
            "api_error": error.get("message"),
        }

    return {
        "api_status": body.get("status"),
        "api_error": body.get("error_message"),
    }


def merge_context(error: MapsApiError, **context: Any) -> MapsApiError:
    """
    Add diagnostic keys to an error without overwriting what it already
    carries. None values are skipped.
    """
    for key, value in context.items():
        if value is not None and key not in error.context:
            error.context[key] = value
    return error


def classify_transport_error(exc: Exception, endpoint: str) -> MapsApiError:
    """Network, timeout and connection failures."""
    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, requests.exceptions.Timeout):
        message = f"Request timed out: {message}"
    return MapsApiError(
        REQUEST_FAILED,
        message,
        {"endpoint": endpoint, "exception": exc.__class__.__name__},
        retryable=True,
    )


def classify_http_response(response: requests.Response, endpoint: str) -> MapsApiError:
    """
    Non-2xx responses. The kind is the upstream status when the body names
    one, else derived from the HTTP status code.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    upstream = _upstream_status(body)
    api_status = upstream.get("api_status")
    api_error = upstream.get("api_error")

    kind = api_status if isinstance(api_status, str) and api_status else http_kind(response.status_code)
    message = api_error or f"HTTP {response.status_code}: {response.reason or 'Error'}"

    error = MapsApiError(
        kind,
        message,
        {"endpoint": endpoint, "http_status": response.status_code},
        retryable=True,
    )
    if response.status_code == 429:
        error.retry_after = _parse_retry_after(response.headers.get("Retry-After"))
    return merge_context(error, api_status=api_status, api_error=api_error)


def classify_payload_status(payload: Any,
                            endpoint: str,
                            http_status: int) -> Optional[MapsApiError]:
    """
    Logical failures reported inside a successful HTTP response.

    Returns None when the payload carries no status or status "OK".
    These errors are definitive and never retried.
    """
    if not isinstance(payload, dict):
        return None

    status = payload.get("status")
    if not status or status == "OK" or not isinstance(status, str):
        return None

    message = payload.get("error_message") or "API request failed"
    error = MapsApiError(
        status,
        message,
        {"endpoint": endpoint, "http_status": http_status, "api_status": status},
        retryable=False,
    )
    return merge_context(error, api_error=payload.get("error_message"))


def classify(exc: Exception, endpoint: str, **context: Any) -> MapsApiError:
    """
    Final classification of whatever ended a request.

    Already classified errors keep their kind and context and only gain the
    missing breadcrumbs.
    """
    if isinstance(exc, MapsApiError):
        error = exc
    elif isinstance(exc, requests.exceptions.RequestException):
        error = classify_transport_error(exc, endpoint)
    else:
        error = MapsApiError(REQUEST_FAILED, str(exc) or "Unknown error", {"endpoint": endpoint})
    return merge_context(error, endpoint=endpoint, **context)
