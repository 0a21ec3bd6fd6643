"""
Configuration for the maps request core.

Defines the upstream API surfaces (base host and authentication mode) and
the rate-limit settings read from the environment.
"""

from dataclasses import dataclass
from enum import Enum

from ..config.config_module import get_bool_config, get_int_config
from ..config.logger_module import log_warning


DEFAULT_RATE_LIMIT_WINDOW_MS = 60000
DEFAULT_RATE_LIMIT_MAX_REQUESTS = 100

REQUEST_TIMEOUT_SECONDS = 30
MAX_ATTEMPTS = 3

# Cache lifetimes in seconds
GEOCODE_CACHE_TTL = 300
PLACES_SEARCH_CACHE_TTL = 60
PLACES_DETAILS_CACHE_TTL = 300
ELEVATION_CACHE_TTL = 300
TIMEZONE_CACHE_TTL = 3600


class ApiSurface(Enum):
    """
    Upstream API families.

    The newer Places and Routes APIs authenticate with an X-Goog-Api-Key
    header and require an X-Goog-FieldMask header; the others take the key
    as a query parameter.
    """

    MAPS = ("https://maps.googleapis.com/maps/api", False)
    PLACES = ("https://places.googleapis.com", True)
    ROUTES = ("https://routes.googleapis.com", True)
    GEOLOCATION = ("https://www.googleapis.com", False)
    ROADS = ("https://roads.googleapis.com", False)

    def __init__(self, base_url: str, uses_header_auth: bool):
        self.base_url = base_url
        self.uses_header_auth = uses_header_auth

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"


@dataclass
class RateLimitConfig:
    """Sliding-window rate limit settings."""

    enabled: bool = True
    window_ms: int = DEFAULT_RATE_LIMIT_WINDOW_MS
    max_requests: int = DEFAULT_RATE_LIMIT_MAX_REQUESTS

    def __post_init__(self):
        """Replace non-positive values with the defaults."""
        if self.window_ms <= 0:
            log_warning(
                f"Invalid GOOGLE_MAPS_RATE_LIMIT_WINDOW_MS ({self.window_ms}), "
                f"using default: {DEFAULT_RATE_LIMIT_WINDOW_MS}ms"
            )
            self.window_ms = DEFAULT_RATE_LIMIT_WINDOW_MS

        if self.max_requests <= 0:
            log_warning(
                f"Invalid GOOGLE_MAPS_RATE_LIMIT_MAX_REQUESTS ({self.max_requests}), "
                f"using default: {DEFAULT_RATE_LIMIT_MAX_REQUESTS}"
            )
            self.max_requests = DEFAULT_RATE_LIMIT_MAX_REQUESTS

    @classmethod
    def from_env(cls) -> "RateLimitConfig":
        """Build settings from the GOOGLE_MAPS_RATE_LIMIT_* variables."""
        return cls(
            enabled=get_bool_config("GOOGLE_MAPS_RATE_LIMIT_ENABLED", True),
            window_ms=get_int_config(
                "GOOGLE_MAPS_RATE_LIMIT_WINDOW_MS", DEFAULT_RATE_LIMIT_WINDOW_MS
            ),
            max_requests=get_int_config(
                "GOOGLE_MAPS_RATE_LIMIT_MAX_REQUESTS", DEFAULT_RATE_LIMIT_MAX_REQUESTS
            ),
        )
