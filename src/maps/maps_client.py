"""
Google Maps Platform client.

Exposes geocoding, places, routes, elevation, timezone, geolocation and
roads operations on top of the RequestExecutor, translating caller
parameters into each API's request shape and normalizing the responses.
"""

import time
from typing import Any, Dict, List, Sequence

from ..config.config_module import get_api_key, load_config
from ..config.logger_module import log_info
from .maps_config import (
    ApiSurface,
    ELEVATION_CACHE_TTL,
    GEOCODE_CACHE_TTL,
    PLACES_DETAILS_CACHE_TTL,
    PLACES_SEARCH_CACHE_TTL,
    TIMEZONE_CACHE_TTL,
    RateLimitConfig,
)
from .maps_executor import RequestExecutor
from .maps_normalizer import (
    format_latlng,
    format_latlng_list,
    format_location_for_routes,
    normalize_geocode_result,
    normalize_places,
    normalize_place,
    normalize_route,
    transform_location_bias,
    transform_places_fields,
)
from .maps_types import (
    Coordinate,
    GeocodeResult,
    PlaceResult,
    RouteResult,
    to_coordinate,
    to_location_ref,
)


PLACES_SEARCH_FIELD_MASK = (
    "places.id,places.displayName,places.formattedAddress,places.addressComponents,"
    "places.location,places.rating,places.types,places.photos"
)
PLACES_DETAILS_FIELD_MASK = (
    "id,displayName,formattedAddress,addressComponents,location,rating,types,"
    "photos,currentOpeningHours,priceLevel"
)
ROUTES_FIELD_MASK = "routes.duration,routes.distanceMeters,routes.polyline.encodedPolyline,routes.legs"


def _put(body: Dict[str, Any], key: str, value: Any) -> None:
    """Set key only when value is meaningful (non-empty, non-None)."""
    if value is None:
        return
    if isinstance(value, (list, tuple, dict, str)) and not value:
        return
    body[key] = value


class GoogleMapsClient:
    """
    Geospatial operations over the Google Maps Platform.

    Legacy web services (geocoding, elevation, timezone, photos) take the key
    as a query parameter; Places (New) and Routes take it in a header along
    with a field mask. Both are handled by the executor.
    """

    def __init__(self,
                 api_key: str = None,
                 executor: RequestExecutor = None,
                 rate_limit: RateLimitConfig = None):
        """
        Initialize the client.

        Args:
            api_key: Google Maps API key (read from .env or the environment if
                not provided)
            executor: Pre-built executor to share between clients
            rate_limit: Rate limit settings for a new executor

        Raises:
            ConfigError: If no API key is available
        """
        if executor is None:
            if api_key is None:
                load_config()
            executor = RequestExecutor(get_api_key(api_key), rate_limit=rate_limit)
        self.executor = executor

        log_info(
            f"GoogleMapsClient initialized (rate_limit_enabled={executor.rate_limit.enabled}, "
            f"max={executor.rate_limit.max_requests}/{executor.rate_limit.window_ms}ms)"
        )

    # Geocoding API

    def geocode_search(self,
                       query: str,
                       region: str = None,
                       language: str = None) -> List[GeocodeResult]:
        """
        Forward geocode an address or place name.

        Raises:
            MapsApiError: ZERO_RESULTS when nothing matches, or any request failure
        """
        params = {"address": query, "region": region, "language": language}
        data = self.executor.execute("/geocode/json", params, cache_ttl=GEOCODE_CACHE_TTL)
        return [normalize_geocode_result(result) for result in data.get("results", [])]

    def geocode_reverse(self,
                        lat: float,
                        lng: float,
                        language: str = None) -> List[GeocodeResult]:
        """Reverse geocode a coordinate. Results report the queried point."""
        point = Coordinate(lat=lat, lng=lng)
        params = {"latlng": format_latlng(point), "language": language}
        data = self.executor.execute("/geocode/json", params, cache_ttl=GEOCODE_CACHE_TTL)
        return [normalize_geocode_result(result, location=point) for result in data.get("results", [])]

    # Places API (New)

    def places_search_text(self,
                           query: str,
                           included_types: Sequence[str] = None,
                           excluded_types: Sequence[str] = None,
                           open_now: bool = None,
                           price_levels: Sequence[Any] = None,
                           min_rating: float = None,
                           location_bias: Dict[str, Any] = None,
                           rank_preference: str = None,
                           language: str = None,
                           region: str = None,
                           max_results: int = None) -> List[PlaceResult]:
        """Free-text place search."""
        body = {"textQuery": query}
        _put(body, "includedTypes", list(included_types or []))
        _put(body, "excludedTypes", list(excluded_types or []))
        _put(body, "openNow", open_now)
        _put(body, "priceLevels", list(price_levels or []))
        if min_rating:
            body["minRating"] = min_rating
        _put(body, "locationBias", transform_location_bias(location_bias))
        _put(body, "rankPreference", rank_preference)
        _put(body, "languageCode", language)
        _put(body, "regionCode", region)
        _put(body, "maxResultCount", max_results)

        data = self.executor.execute(
            "/v1/places:searchText",
            method="POST",
            body=body,
            cache_ttl=PLACES_SEARCH_CACHE_TTL,
            surface=ApiSurface.PLACES,
            field_mask=PLACES_SEARCH_FIELD_MASK,
        )
        return normalize_places(data.get("places"))

    def places_nearby(self,
                      location: Any,
                      radius_meters: float,
                      included_types: Sequence[str] = None,
                      max_results: int = None,
                      language: str = None,
                      region: str = None) -> List[PlaceResult]:
        """Places within a circle around a coordinate."""
        center = to_coordinate(location)
        body = {
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": center.lat, "longitude": center.lng},
                    "radius": radius_meters,
                }
            }
        }
        _put(body, "includedTypes", list(included_types or []))
        if max_results:
            body["maxResultCount"] = max_results
        _put(body, "languageCode", language)
        _put(body, "regionCode", region)

        data = self.executor.execute(
            "/v1/places:searchNearby",
            method="POST",
            body=body,
            cache_ttl=PLACES_SEARCH_CACHE_TTL,
            surface=ApiSurface.PLACES,
            field_mask=PLACES_SEARCH_FIELD_MASK,
        )
        return normalize_places(data.get("places"))

    def places_autocomplete(self,
                            input_text: str,
                            session_token: str = None,
                            location_bias: Dict[str, Any] = None,
                            included_types: Sequence[str] = None,
                            language: str = None,
                            region: str = None) -> List[Dict[str, Any]]:
        """Autocomplete suggestions. Never cached (session scoped)."""
        body = {"input": input_text}
        _put(body, "sessionToken", session_token)
        _put(body, "locationBias", transform_location_bias(location_bias))
        _put(body, "includedTypes", list(included_types or []))
        _put(body, "languageCode", language)
        _put(body, "regionCode", region)

        data = self.executor.execute(
            "/v1/places:autocomplete",
            method="POST",
            body=body,
            surface=ApiSurface.PLACES,
        )
        return data.get("suggestions", [])

    def places_details(self,
                       place_id: str,
                       fields: Sequence[str] = None,
                       language: str = None,
                       region: str = None,
                       session_token: str = None) -> PlaceResult:
        """
        Details for one place.

        Args:
            place_id: Place identifier
            fields: Friendly or API field names; id is always requested
        """
        field_mask = transform_places_fields(fields, add_prefix=False) if fields else PLACES_DETAILS_FIELD_MASK
        params = {"languageCode": language, "regionCode": region, "sessionToken": session_token}

        data = self.executor.execute(
            f"/v1/places/{place_id}",
            params,
            cache_ttl=PLACES_DETAILS_CACHE_TTL,
            surface=ApiSurface.PLACES,
            field_mask=field_mask,
        )
        return normalize_place(data)

    def places_photo_url(self,
                         photo_reference: str,
                         max_width: int = None,
                         max_height: int = None) -> str:
        """Build a Place Photo URL. No request is made."""
        params = {"photoreference": photo_reference}
        if max_width:
            params["maxwidth"] = max_width
        if max_height:
            params["maxheight"] = max_height
        return self.executor.build_signed_url("/place/photo", params)

    # Routes API

    def routes_compute(self,
                       origin: Any,
                       destination: Any,
                       waypoints: Sequence[Any] = None,
                       travel_mode: str = None,
                       routing_preference: str = None,
                       compute_alternative_routes: bool = False,
                       avoid_tolls: bool = False,
                       avoid_highways: bool = False,
                       avoid_ferries: bool = False,
                       language: str = None,
                       region: str = None,
                       units: str = None) -> Dict[str, List[RouteResult]]:
        """
        Compute routes between two places.

        Waypoints may be LocationRefs or {"location": LocationRef, "via": bool}.
        """
        body = {
            "origin": format_location_for_routes(to_location_ref(origin)),
            "destination": format_location_for_routes(to_location_ref(destination)),
            "travelMode": travel_mode or "DRIVE",
            "routingPreference": routing_preference or "TRAFFIC_AWARE",
        }

        if waypoints:
            intermediates = []
            for waypoint in waypoints:
                if isinstance(waypoint, dict) and "location" in waypoint:
                    intermediate = format_location_for_routes(to_location_ref(waypoint["location"]))
                    if waypoint.get("via"):
                        intermediate["via"] = True
                else:
                    intermediate = format_location_for_routes(to_location_ref(waypoint))
                intermediates.append(intermediate)
            body["intermediates"] = intermediates

        if compute_alternative_routes:
            body["computeAlternativeRoutes"] = True

        modifiers = {}
        if avoid_tolls:
            modifiers["avoidTolls"] = True
        if avoid_highways:
            modifiers["avoidHighways"] = True
        if avoid_ferries:
            modifiers["avoidFerries"] = True
        _put(body, "routeModifiers", modifiers)

        _put(body, "languageCode", language)
        _put(body, "regionCode", region)
        _put(body, "units", units)

        data = self.executor.execute(
            "/directions/v2:computeRoutes",
            method="POST",
            body=body,
            surface=ApiSurface.ROUTES,
            field_mask=ROUTES_FIELD_MASK,
        )
        return {"routes": [normalize_route(route) for route in data.get("routes", [])]}

    def routes_matrix(self,
                      origins: Sequence[Any],
                      destinations: Sequence[Any],
                      travel_mode: str = None,
                      routing_preference: str = None,
                      language: str = None,
                      region: str = None,
                      units: str = None) -> Any:
        """Route matrix between origins and destinations, returned as-is."""
        body = {
            "origins": [{"waypoint": format_location_for_routes(to_location_ref(o))} for o in origins],
            "destinations": [{"waypoint": format_location_for_routes(to_location_ref(d))} for d in destinations],
            "travelMode": travel_mode or "DRIVE",
            "routingPreference": routing_preference or "TRAFFIC_AWARE",
        }
        _put(body, "languageCode", language)
        _put(body, "regionCode", region)
        _put(body, "units", units)

        return self.executor.execute(
            "/distanceMatrix/v2:computeRouteMatrix",
            method="POST",
            body=body,
            surface=ApiSurface.ROUTES,
            field_mask="*",
        )

    # Utility APIs

    def elevation_get(self,
                      locations: Sequence[Any] = None,
                      path: str = None,
                      samples: int = None) -> List[Dict[str, Any]]:
        """
        Elevation for discrete locations, or sampled along a path.

        Locations win when both are given.
        """
        params = {}
        if locations:
            params["locations"] = format_latlng_list(to_coordinate(l) for l in locations)
        elif path:
            params["path"] = path
            if samples:
                params["samples"] = samples

        data = self.executor.execute("/elevation/json", params, cache_ttl=ELEVATION_CACHE_TTL)
        return data.get("results", [])

    def timezone_get(self,
                     lat: float,
                     lng: float,
                     timestamp: int = None,
                     language: str = None) -> Dict[str, Any]:
        """Time zone at a coordinate; timestamp defaults to now."""
        params = {
            "location": format_latlng(Coordinate(lat=lat, lng=lng)),
            "timestamp": timestamp or int(time.time()),
            "language": language,
        }
        return self.executor.execute("/timezone/json", params, cache_ttl=TIMEZONE_CACHE_TTL)

    def geolocation_estimate(self,
                             wifi_access_points: Sequence[Dict[str, Any]] = None,
                             cell_towers: Sequence[Dict[str, Any]] = None,
                             consider_ip: bool = None) -> Dict[str, Any]:
        """
        Estimate device position from WiFi access points and cell towers.

        Entries are passed through in the Geolocation API's camelCase shape.
        """
        body = {"considerIp": consider_ip is not False}
        _put(body, "wifiAccessPoints", list(wifi_access_points or []))
        _put(body, "cellTowers", list(cell_towers or []))

        return self.executor.execute(
            "/geolocation/v1/geolocate",
            method="POST",
            body=body,
            surface=ApiSurface.GEOLOCATION,
        )

    def roads_nearest(self,
                      points: Sequence[Any],
                      travel_mode: str = None) -> Dict[str, Any]:
        """Snap points to their nearest road segments."""
        params = {
            "points": format_latlng_list(to_coordinate(p) for p in points),
            "travelMode": travel_mode,
        }
        return self.executor.execute("/v1/nearestRoads", params, surface=ApiSurface.ROADS)
