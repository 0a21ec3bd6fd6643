"""
Shape adapters between the caller-facing model and the upstream JSON.

The legacy web services and the newer Places/Routes APIs describe the same
entities with different field names; everything here reduces both to the
records in maps_types, and translates caller shapes into request shapes.
"""

import math
import re
from typing import Any, Dict, Iterable, List, Optional

from googlemaps import convert

from .maps_types import (
    Address,
    Coordinate,
    GeocodeResult,
    LocationRef,
    PlaceResult,
    RouteLeg,
    RouteResult,
    TollInfo,
)


EARTH_RADIUS_METERS = 6371000

# Friendly/legacy Places field names -> Places API (New) field names
PLACES_FIELD_MAP = {
    "place_id": "id",
    "name": "displayName",
    "formatted_address": "formattedAddress",
    "address_components": "addressComponents",
    "editorial_summary": "editorialSummary",
    "reviews": "reviews",
    "rating": "rating",
    "opening_hours": "currentOpeningHours",
    "regular_opening_hours": "regularOpeningHours",
    "location": "location",
    "types": "types",
    "photos": "photos",
    "price_level": "priceLevel",
    "phone_number": "nationalPhoneNumber",
    "international_phone_number": "internationalPhoneNumber",
    "website": "websiteUri",
    "business_status": "businessStatus",
    "user_ratings_total": "userRatingCount",
}

# Places API (New) price enum -> legacy 0-4 scale
PRICE_LEVELS = {
    "PRICE_LEVEL_UNSPECIFIED": None,
    "PRICE_LEVEL_FREE": 0,
    "PRICE_LEVEL_INEXPENSIVE": 1,
    "PRICE_LEVEL_MODERATE": 2,
    "PRICE_LEVEL_EXPENSIVE": 3,
    "PRICE_LEVEL_VERY_EXPENSIVE": 4,
}

_DURATION_RE = re.compile(r"^\s*(\d+)(?:\.\d*)?\s*s?\s*$")


def parse_duration(value: Any) -> int:
    """
    Parse an upstream duration such as "123s" into whole seconds.

    Numbers are truncated; anything missing or malformed is 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        match = _DURATION_RE.match(value)
        if match:
            return int(match.group(1))
    return 0


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _coordinate(lat: Any, lng: Any) -> Optional[Coordinate]:
    """A Coordinate when both parts are numeric, else None."""
    lat, lng = _number(lat), _number(lng)
    if lat is None or lng is None:
        return None
    return Coordinate(lat=lat, lng=lng)


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _place_location(place: Dict[str, Any]) -> Optional[Coordinate]:
    geometry = place.get("geometry")
    if isinstance(geometry, dict) and isinstance(geometry.get("location"), dict):
        legacy = geometry["location"]
        return _coordinate(legacy.get("lat"), legacy.get("lng"))

    location = place.get("location")
    if isinstance(location, dict):
        return _coordinate(
            _first_present(location.get("latitude"), location.get("lat")),
            _first_present(location.get("longitude"), location.get("lng")),
        )
    return None


def _price_level(place: Dict[str, Any]) -> Any:
    """Legacy integer price level; unknown enum names pass through."""
    level = _first_present(place.get("price_level"), place.get("priceLevel"))
    if isinstance(level, str):
        return PRICE_LEVELS.get(level, level)
    return level


def _place_name(place: Dict[str, Any]) -> str:
    name = place.get("name")
    if name:
        return str(name)

    display_name = place.get("displayName")
    if isinstance(display_name, dict) and display_name.get("text"):
        return str(display_name["text"])
    if isinstance(display_name, str) and display_name:
        return display_name

    return "Unknown"


def normalize_place(place: Dict[str, Any]) -> PlaceResult:
    """
    Reduce a legacy or new-style place object to a PlaceResult.

    Legacy: place_id, name, formatted_address, geometry.location.{lat,lng}.
    New: id, displayName.text, formattedAddress, location.{latitude,longitude}.
    """
    rating = _number(place.get("rating"))

    return PlaceResult(
        id=_first_present(place.get("place_id"), place.get("id")),
        name=_place_name(place),
        formatted_address=_first_present(
            place.get("formattedAddress"), place.get("formatted_address")
        ),
        address_components=_first_present(
            place.get("addressComponents"), place.get("address_components")
        ),
        location=_place_location(place),
        rating=rating,
        price_level=_price_level(place),
        types=place.get("types"),
        opening_hours=_first_present(
            place.get("opening_hours"), place.get("currentOpeningHours")
        ),
        photos=place.get("photos"),
    )


def normalize_places(places: Optional[Iterable[Dict[str, Any]]]) -> List[PlaceResult]:
    return [normalize_place(place) for place in places or []]


def normalize_geocode_result(result: Dict[str, Any],
                             location: Optional[Coordinate] = None) -> GeocodeResult:
    """
    Reduce a Geocoding API result.

    Args:
        result: One entry of the upstream "results" list
        location: Use this point instead of the result geometry (reverse lookups
            report the queried point)
    """
    if location is None:
        geometry = result.get("geometry") or {}
        legacy = geometry.get("location") or {}
        location = _coordinate(legacy.get("lat"), legacy.get("lng")) or Coordinate(lat=0.0, lng=0.0)

    return GeocodeResult(
        formatted_address=result.get("formatted_address"),
        location=location,
        address_components=result.get("address_components"),
        place_id=result.get("place_id"),
        types=result.get("types"),
    )


def _leg_point(point: Any) -> Coordinate:
    lat_lng = (point or {}).get("latLng") or {}
    return Coordinate(
        lat=_number(lat_lng.get("latitude")) or 0.0,
        lng=_number(lat_lng.get("longitude")) or 0.0,
    )


def _legacy_point(point: Any) -> Coordinate:
    point = point or {}
    return Coordinate(
        lat=_number(point.get("lat")) or 0.0,
        lng=_number(point.get("lng")) or 0.0,
    )


def _value(field: Any) -> int:
    """Legacy {"value": n, "text": ...} pairs."""
    if isinstance(field, dict):
        number = _number(field.get("value"))
        return int(number) if number is not None else 0
    return 0


def _is_legacy_route(route: Dict[str, Any]) -> bool:
    if "overview_polyline" in route:
        return True
    legs = route.get("legs") or []
    return any(isinstance(leg.get("distance"), dict) for leg in legs if isinstance(leg, dict))


def _normalize_legacy_route(route: Dict[str, Any]) -> RouteResult:
    total_distance = 0
    total_duration = 0
    total_in_traffic = 0
    legs = []

    for leg in route.get("legs") or []:
        distance = _value(leg.get("distance"))
        duration = _value(leg.get("duration"))
        total_distance += distance
        total_duration += duration
        total_in_traffic += _value(leg.get("duration_in_traffic"))

        legs.append(RouteLeg(
            start=_legacy_point(leg.get("start_location")),
            end=_legacy_point(leg.get("end_location")),
            steps=len(leg.get("steps") or []),
            distance_meters=distance,
            duration_seconds=duration,
        ))

    return RouteResult(
        distance_meters=total_distance,
        duration_seconds=total_duration,
        duration_in_traffic_seconds=total_in_traffic or None,
        polyline=(route.get("overview_polyline") or {}).get("points") or "",
        legs=legs,
    )


def normalize_route(route: Dict[str, Any]) -> RouteResult:
    """
    Reduce a Routes API route (or a legacy Directions route) to a RouteResult.

    Legs keep start/end, step count, distance and duration only.
    """
    if _is_legacy_route(route):
        return _normalize_legacy_route(route)

    result = RouteResult(
        distance_meters=int(_number(route.get("distanceMeters")) or 0),
        duration_seconds=parse_duration(route.get("duration")),
        polyline=(route.get("polyline") or {}).get("encodedPolyline") or "",
    )

    if route.get("staticDuration"):
        result.duration_in_traffic_seconds = parse_duration(route["staticDuration"])

    # Toll amounts are not extracted; presence of tollInfo yields the placeholder
    if (route.get("travelAdvisory") or {}).get("tollInfo"):
        result.tolls = TollInfo()

    result.legs = [
        RouteLeg(
            start=_leg_point(leg.get("startLocation")),
            end=_leg_point(leg.get("endLocation")),
            steps=len(leg.get("steps") or []),
            distance_meters=int(_number(leg.get("distanceMeters")) or 0),
            duration_seconds=parse_duration(leg.get("duration")),
        )
        for leg in route.get("legs") or []
    ]
    return result


def transform_places_fields(fields: Iterable[str], add_prefix: bool = True) -> str:
    """
    Translate caller field names into a Places API (New) field mask.

    Known snake_case names are mapped to camelCase, unknown names pass through.
    The id field is always present. Search requests (POST) need the
    "places." prefix; details requests (GET) do not.

    Example:
        ["name", "rating"] -> "places.id,places.displayName,places.rating"
    """
    id_field = "places.id" if add_prefix else "id"
    mask = []

    for field in fields:
        mapped = PLACES_FIELD_MAP.get(field.lower(), field)
        if add_prefix and not mapped.startswith("places."):
            mapped = f"places.{mapped}"
        if mapped not in mask:
            mask.append(mapped)

    if id_field not in mask:
        mask.insert(0, id_field)

    return ",".join(mask)


def transform_location(location: Any) -> Any:
    """{lat, lng} -> {latitude, longitude}; other shapes pass through."""
    if isinstance(location, Coordinate):
        return {"latitude": location.lat, "longitude": location.lng}
    if isinstance(location, dict) and "lat" in location and "lng" in location:
        return {"latitude": location["lat"], "longitude": location["lng"]}
    return location


def transform_location_bias(location_bias: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Translate a caller location bias into the Places API (New) shape.

    {"circle": {"center": {"lat", "lng"}, "radius_meters": r}} becomes
    {"circle": {"center": {"latitude", "longitude"}, "radius": r}}.
    """
    if not location_bias:
        return location_bias

    transformed = dict(location_bias)
    circle = transformed.get("circle")
    if isinstance(circle, dict):
        circle = dict(circle)
        if "center" in circle:
            circle["center"] = transform_location(circle["center"])
        if "radius_meters" in circle and "radius" not in circle:
            circle["radius"] = circle.pop("radius_meters")
        transformed["circle"] = circle
    return transformed


def format_location_for_routes(location: LocationRef) -> Dict[str, Any]:
    """A Routes API waypoint for an address or a coordinate."""
    if isinstance(location, Address):
        return {"location": {"address": location.address}}
    return {"location": {"latLng": {"latitude": location.lat, "longitude": location.lng}}}


def format_latlng(location: Coordinate) -> str:
    """Format a coordinate as the lat,lng string the legacy services expect."""
    return convert.latlng({"lat": location.lat, "lng": location.lng})


def format_latlng_list(locations: Iterable[Coordinate]) -> str:
    """Pipe-separated lat,lng pairs for multi-point query parameters."""
    return convert.location_list([{"lat": l.lat, "lng": l.lng} for l in locations])


def haversine_distance(point1: Coordinate, point2: Coordinate) -> float:
    """
    Great-circle distance in meters between two coordinates.

    Uses a spherical Earth of radius 6,371,000 m.
    """
    lat1 = math.radians(point1.lat)
    lat2 = math.radians(point2.lat)
    delta_lat = math.radians(point2.lat - point1.lat)
    delta_lng = math.radians(point2.lng - point1.lng)

    a = (math.sin(delta_lat / 2) ** 2
         + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c
