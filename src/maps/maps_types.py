"""
Data models for the maps core.

Inputs that name a place are a LocationRef: either a Coordinate or a
free-text Address. Outputs are the stable records the normalizer produces.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel

from .maps_errors import INVALID_ARGUMENT, MapsApiError


class Coordinate(BaseModel):
    """A point in floating point degrees. Range is not enforced."""
    lat: float
    lng: float


class Address(BaseModel):
    """A free-text address to be resolved by the upstream service."""
    address: str


LocationRef = Union[Coordinate, Address]


def to_location_ref(value: Any) -> LocationRef:
    """
    Resolve a caller value into a LocationRef.

    Accepts Coordinate/Address instances or mappings with an "address" key
    or "lat"/"lng" keys.

    Raises:
        MapsApiError: INVALID_ARGUMENT when the value is neither shape
    """
    if isinstance(value, (Coordinate, Address)):
        return value
    if isinstance(value, dict):
        if "address" in value:
            return Address(address=value["address"])
        if "lat" in value and "lng" in value:
            return Coordinate(lat=value["lat"], lng=value["lng"])
    raise MapsApiError(
        INVALID_ARGUMENT,
        "Location must be an address or a lat/lng pair",
        {"value": repr(value)},
    )


def to_coordinate(value: Any) -> Coordinate:
    """Resolve a caller value that must be a coordinate."""
    ref = to_location_ref(value)
    if not isinstance(ref, Coordinate):
        raise MapsApiError(
            INVALID_ARGUMENT,
            "Expected a lat/lng pair, got an address",
            {"value": repr(value)},
        )
    return ref


class GeocodeResult(BaseModel):
    formatted_address: Optional[str] = None
    location: Coordinate
    address_components: Optional[List[Dict[str, Any]]] = None
    place_id: Optional[str] = None
    types: Optional[List[str]] = None


class PlaceResult(BaseModel):
    """A place in either Places API generation, reduced to one shape."""
    id: Optional[str] = None
    name: str
    formatted_address: Optional[str] = None
    address_components: Optional[List[Dict[str, Any]]] = None
    location: Optional[Coordinate] = None
    rating: Optional[float] = None
    price_level: Optional[Union[int, str]] = None
    types: Optional[List[str]] = None
    opening_hours: Optional[Dict[str, Any]] = None
    photos: Optional[List[Dict[str, Any]]] = None


class RouteLeg(BaseModel):
    start: Coordinate
    end: Coordinate
    steps: int = 0
    distance_meters: int = 0
    duration_seconds: int = 0


class TollInfo(BaseModel):
    """Placeholder: upstream toll amounts are not extracted."""
    currency: str = "USD"
    estimated: float = 0


class RouteResult(BaseModel):
    distance_meters: int = 0
    duration_seconds: int = 0
    duration_in_traffic_seconds: Optional[int] = None
    polyline: str = ""
    tolls: Optional[TollInfo] = None
    legs: List[RouteLeg] = []


class NearbyPlace(BaseModel):
    id: Optional[str] = None
    name: str
    kind: str
    location: Optional[Coordinate] = None
    distance_meters: int
    formatted_address: Optional[str] = None
