"""
Google Maps request core.

This module provides functionality for:
- Executing authenticated, rate-limited, cached and retried API calls
- Classifying every failure into a single error shape
- Normalizing legacy and new-style Places/Routes payloads
- Geocoding, places, routes and utility operations
- Nearby search and IP geolocation workflows
- Static reference documents about the APIs

Main classes:
- GoogleMapsClient: Operation surface over the Google Maps Platform
- MapsOrchestrator: Multi-step workflows built on the client
- RequestExecutor: Auth, rate limiting, caching and retry for one call
- ResponseCache: In-memory TTL cache of successful payloads
- SlidingWindowRateLimiter: Per-endpoint sliding-window admission

Errors:
- MapsApiError: Every failure leaving the core
- ResourceNotFoundError: Unknown reference resource URI

Configuration:
- GoogleMapsClient() without a key loads .env (src.config.config_module.load_config)
  and reads GOOGLE_MAPS_API_KEY and GOOGLE_MAPS_RATE_LIMIT_* from the environment
- Applications can fail fast with validate_config(["GOOGLE_MAPS_API_KEY"])
"""

from .maps_cache import ResponseCache
from .maps_client import GoogleMapsClient
from .maps_config import ApiSurface, RateLimitConfig
from .maps_errors import MapsApiError, ResourceNotFoundError
from .maps_executor import RequestExecutor
from .maps_rate_limiter import SlidingWindowRateLimiter
from .maps_resources import get_resource_content, list_resources
from .maps_workflow import MapsOrchestrator

__all__ = [
    # Main classes
    "GoogleMapsClient",
    "MapsOrchestrator",
    "RequestExecutor",
    "ResponseCache",
    "SlidingWindowRateLimiter",
    "RateLimitConfig",
    "ApiSurface",

    # Resources
    "list_resources",
    "get_resource_content",

    # Errors
    "MapsApiError",
    "ResourceNotFoundError",
]

# Version info
__version__ = "1.0.0"
