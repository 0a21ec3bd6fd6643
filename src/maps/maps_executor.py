"""
Request executor for the Google Maps APIs.

Turns a logical API call into an authenticated, rate-limited, cached and
retried HTTP request. Every failure leaves as a MapsApiError.
"""

import time
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import requests
from tenacity import Retrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

from ..config.logger_module import log_debug, log_error, log_info, log_warning
from .maps_cache import ResponseCache
from .maps_classifier import (
    classify,
    classify_http_response,
    classify_payload_status,
    classify_transport_error,
)
from .maps_config import ApiSurface, MAX_ATTEMPTS, REQUEST_TIMEOUT_SECONDS, RateLimitConfig
from .maps_errors import MapsApiError, REQUEST_FAILED
from .maps_rate_limiter import SlidingWindowRateLimiter


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, MapsApiError) and exc.retryable


def _encode_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Stringify query values; None values are dropped, booleans are lowercased."""
    encoded = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        else:
            encoded[key] = str(value)
    return encoded


class RequestExecutor:
    """
    Executes calls against the Google Maps web services.

    One instance owns its cache, rate-limit windows and HTTP session; build
    it once per credential and share it between callers.
    """

    USER_AGENT = "google-maps-tools/1.0.0"

    def __init__(self,
                 api_key: str,
                 rate_limit: RateLimitConfig = None,
                 cache: ResponseCache = None,
                 rate_limiter: SlidingWindowRateLimiter = None,
                 session: requests.Session = None,
                 sleep: Callable[[float], None] = time.sleep,
                 request_timeout: float = REQUEST_TIMEOUT_SECONDS,
                 max_attempts: int = MAX_ATTEMPTS):
        """
        Initialize the executor.

        Args:
            api_key: Google Maps API key
            rate_limit: Rate limit settings (read from the environment if None)
            cache: Response cache (a fresh in-memory cache if None)
            rate_limiter: Limiter to use instead of one built from rate_limit
            session: HTTP session (a new requests.Session if None)
            sleep: Blocking sleep used for retry backoff and rate-limit waits
            request_timeout: Per-attempt HTTP timeout in seconds
            max_attempts: Attempts per call, including the first
        """
        self.api_key = api_key
        self.rate_limit = rate_limit or RateLimitConfig.from_env()
        self.cache = cache if cache is not None else ResponseCache()
        self.rate_limiter = rate_limiter if rate_limiter is not None else SlidingWindowRateLimiter(
            window_ms=self.rate_limit.window_ms,
            max_requests=self.rate_limit.max_requests,
            sleep=sleep,
        )
        self.request_timeout = request_timeout

        self._session = session if session is not None else requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": self.USER_AGENT,
        })

        self._throttle_backoff = wait_exponential(multiplier=2, exp_base=2)
        self._failure_backoff = wait_exponential(multiplier=4, exp_base=2)
        self._retrying = Retrying(
            stop=stop_after_attempt(max_attempts),
            wait=self._retry_wait,
            retry=retry_if_exception(_is_retryable),
            before_sleep=self._log_retry,
            sleep=sleep,
            reraise=True,
        )

    def _retry_wait(self, retry_state: RetryCallState) -> float:
        """
        Seconds to wait before the next attempt.

        A Retry-After from the provider wins. Other 429s wait 2, 4, ... seconds;
        every other retryable failure waits 4, 8, ... seconds.
        """
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        retry_after = getattr(exc, "retry_after", None)
        if retry_after is not None:
            return retry_after
        if (getattr(exc, "context", None) or {}).get("http_status") == 429:
            return self._throttle_backoff(retry_state)
        return self._failure_backoff(retry_state)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        log_warning(
            f"Attempt {retry_state.attempt_number} failed ({getattr(exc, 'kind', exc)}: {exc}); "
            f"retrying in {delay:.1f}s"
        )

    def _send(self,
              method: str,
              url: str,
              endpoint: str,
              query: Dict[str, str],
              headers: Dict[str, str],
              body: Any) -> Any:
        """One HTTP attempt. Raises classified MapsApiErrors."""
        kwargs = {
            "params": query,
            "headers": headers,
            "timeout": self.request_timeout,
        }
        if method == "POST" and body is not None:
            kwargs["json"] = body

        try:
            response = self._session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            raise classify_transport_error(e, endpoint) from e

        if not 200 <= response.status_code < 300:
            raise classify_http_response(response, endpoint)

        try:
            payload = response.json()
        except ValueError as e:
            raise MapsApiError(
                REQUEST_FAILED,
                f"Invalid JSON in response: {e}",
                {"endpoint": endpoint, "http_status": response.status_code},
                retryable=True,
            ) from e

        logical_error = classify_payload_status(payload, endpoint, response.status_code)
        if logical_error is not None:
            raise logical_error

        return payload

    def execute(self,
                endpoint: str,
                params: Optional[Dict[str, Any]] = None,
                method: str = "GET",
                body: Any = None,
                cache_ttl: Optional[float] = None,
                surface: ApiSurface = ApiSurface.MAPS,
                field_mask: Optional[str] = None) -> Any:
        """
        Execute a logical API call.

        Workflow:
        1. Return a fresh cached payload when the call is cacheable
        2. Wait for rate-limit admission on the endpoint
        3. Send with up to three attempts, backing off between them
        4. Cache the payload when a TTL was given

        Args:
            endpoint: Path under the surface's base URL
            params: Query parameters (None values are skipped)
            method: "GET" or "POST"
            body: JSON body, sent only with POST
            cache_ttl: Seconds to cache the payload; falsy disables caching
            surface: API family, which fixes base URL and auth placement
            field_mask: Field mask for header-auth surfaces (default "*")

        Returns:
            Decoded JSON payload

        Raises:
            MapsApiError: On any transport, HTTP or upstream failure
        """
        cache_key = None
        if cache_ttl:
            cache_key = self.cache.make_key(surface.url_for(endpoint), params, body)
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        if self.rate_limit.enabled:
            self.rate_limiter.admit(endpoint)

        url = surface.url_for(endpoint)
        query = _encode_params(params)
        headers = {}
        if surface.uses_header_auth:
            headers["X-Goog-Api-Key"] = self.api_key
            headers["X-Goog-FieldMask"] = field_mask or "*"
        else:
            query["key"] = self.api_key

        log_debug(f"{method} {url}")

        retrying = self._retrying.copy()
        try:
            payload = retrying(self._send, method, url, endpoint, query, headers, body)
        except Exception as e:
            error = classify(
                e,
                endpoint,
                url=url,
                attempts=retrying.statistics.get("attempt_number"),
            )
            log_error(f"{method} {endpoint} failed: [{error.kind}] {error.message}")
            raise error from e

        if cache_key is not None:
            self.cache.put(cache_key, payload, cache_ttl)

        return payload

    def build_signed_url(self,
                         endpoint: str,
                         params: Optional[Dict[str, Any]] = None,
                         surface: ApiSurface = ApiSurface.MAPS) -> str:
        """
        Build a key-bearing URL for a query-auth surface without sending it.
        """
        query = _encode_params(params)
        query["key"] = self.api_key
        return f"{surface.url_for(endpoint)}?{urlencode(query)}"

    def get_stats(self) -> Dict[str, Any]:
        """Cache counters and rate-limit settings."""
        return {
            "cache": self.cache.get_cache_stats(),
            "rate_limit": {
                "enabled": self.rate_limit.enabled,
                "window_ms": self.rate_limit.window_ms,
                "max_requests": self.rate_limit.max_requests,
            },
        }

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()
        log_info("RequestExecutor session closed")
