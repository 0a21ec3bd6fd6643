"""
Higher-level capabilities composed from several client calls.

Finds places near an origin ranked by straight-line distance, and
estimates the caller's position from its IP address.
"""

import ipaddress
from typing import Any, Dict, List, Optional, Sequence

from ..config.logger_module import log_info, log_warning
from .maps_client import GoogleMapsClient
from .maps_errors import GEOCODE_FAILED, INVALID_ARGUMENT, INVALID_IP, MapsApiError
from .maps_normalizer import haversine_distance
from .maps_types import Coordinate, NearbyPlace, to_location_ref


DEFAULT_NEARBY_RADIUS_METERS = 30000
DEFAULT_NEARBY_MAX_RESULTS = 20
DEFAULT_IP_ACCURACY_METERS = 25000

NEARBY_KIND_TYPES = {
    "cities": ["locality", "administrative_area_level_1"],
    "towns": ["locality", "administrative_area_level_3"],
}


def is_valid_public_ip(value: str) -> bool:
    """
    True for a well-formed IPv6 address or a public IPv4 address.

    Private (10/8, 172.16/12, 192.168/16) and loopback IPv4 ranges are rejected.
    """
    try:
        address = ipaddress.ip_address(value.strip())
    except ValueError:
        return False

    if address.version == 4:
        first, second = (int(part) for part in str(address).split(".")[:2])
        if first in (10, 127):
            return False
        if first == 172 and 16 <= second <= 31:
            return False
        if first == 192 and second == 168:
            return False
    return True


class MapsOrchestrator:
    """
    Coordinates multi-step lookups on top of a GoogleMapsClient.
    """

    def __init__(self, maps_client: GoogleMapsClient = None):
        """
        Initialize the orchestrator.

        Args:
            maps_client: Client instance (built from config if None)
        """
        self.client = maps_client or GoogleMapsClient()

    def resolve_origin(self, origin: Any) -> Coordinate:
        """
        Turn a LocationRef into a coordinate, geocoding addresses.

        Raises:
            MapsApiError: GEOCODE_FAILED when an address has no match
        """
        ref = to_location_ref(origin)
        if isinstance(ref, Coordinate):
            return ref

        results = self.client.geocode_search(ref.address)
        if not results:
            raise MapsApiError(
                GEOCODE_FAILED,
                "Could not geocode origin address",
                {"address": ref.address},
            )
        return results[0].location

    def find_nearby(self,
                    origin: Any,
                    what: str,
                    included_types: Sequence[str] = None,
                    radius_meters: float = None,
                    max_results: int = None,
                    language: str = None,
                    region: str = None) -> Dict[str, Any]:
        """
        Find cities, towns or points of interest around an origin.

        Workflow:
        1. Resolve the origin (geocoding it if it is an address)
        2. Search nearby with the place types implied by `what`
        3. Annotate each place with its haversine distance and sort by it

        Args:
            origin: Coordinate, Address or equivalent mapping
            what: "cities", "towns", "pois" or "custom"
            included_types: Place types for "pois"/"custom"

        Returns:
            {"origin": Coordinate, "results": [NearbyPlace], "next_page_token": None}
        """
        if what in NEARBY_KIND_TYPES:
            types = NEARBY_KIND_TYPES[what]
        elif what in ("pois", "custom"):
            types = list(included_types or []) or ["point_of_interest"]
        else:
            raise MapsApiError(
                INVALID_ARGUMENT,
                f"Unsupported nearby category: {what}",
                {"what": what},
            )

        origin_location = self.resolve_origin(origin)
        places = self.client.places_nearby(
            origin_location,
            radius_meters or DEFAULT_NEARBY_RADIUS_METERS,
            included_types=types,
            max_results=max_results or DEFAULT_NEARBY_MAX_RESULTS,
            language=language,
            region=region,
        )

        results: List[NearbyPlace] = []
        for place in places:
            distance = haversine_distance(origin_location, place.location) if place.location else 0
            results.append(NearbyPlace(
                id=place.id,
                name=place.name,
                kind=place.types[0] if place.types else "unknown",
                location=place.location,
                distance_meters=round(distance),
                formatted_address=place.formatted_address,
            ))
        results.sort(key=lambda item: item.distance_meters)

        log_info(f"find_nearby({what}) returned {len(results)} places")

        return {
            "origin": origin_location,
            "results": results,
            "next_page_token": None,
        }

    def ip_geolocate(self,
                     reverse_geocode: bool = False,
                     language: str = None,
                     ip_override: str = None) -> Dict[str, Any]:
        """
        Approximate the caller's location from its IP address.

        The Geolocation API always uses the request's source IP; an override
        is validated and reported but cannot be forwarded.

        Raises:
            MapsApiError: INVALID_IP for malformed or private override addresses
        """
        if ip_override and not is_valid_public_ip(ip_override):
            raise MapsApiError(INVALID_IP, "Invalid IP address format", {"ip": ip_override})

        estimate = self.client.geolocation_estimate(consider_ip=True)
        location = estimate.get("location") or {}
        lat, lng = location.get("lat"), location.get("lng")
        accuracy = estimate.get("accuracy") or location.get("accuracy") or DEFAULT_IP_ACCURACY_METERS

        normalized_address: Optional[Dict[str, Any]] = None
        if reverse_geocode and lat is not None and lng is not None:
            try:
                matches = self.client.geocode_reverse(lat, lng, language)
            except MapsApiError as e:
                if e.kind != "ZERO_RESULTS":
                    raise
                log_warning(f"No address found for IP location ({lat}, {lng})")
                matches = []
            if matches:
                normalized_address = {
                    "formatted_address": matches[0].formatted_address,
                    "address_components": matches[0].address_components,
                }

        return {
            "method": "geolocation_api_ip",
            "approximate": True,
            "location": {
                "lat": lat,
                "lng": lng,
                "accuracy_radius_meters": accuracy,
            },
            "normalized_address": normalized_address,
            "source": {
                "provider": "google",
                "reverse_geocode": bool(reverse_geocode),
                "ip_override_attempted": bool(ip_override),
            },
        }
