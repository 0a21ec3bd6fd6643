"""
Static reference documents about the Google Maps APIs.

Served without any network call. Unknown URIs raise ResourceNotFoundError.
"""

import json
from typing import Any, Dict, List

from .maps_errors import ResourceNotFoundError


RESOURCES: List[Dict[str, str]] = [
    {
        "uri": "google-maps://docs/api-overview",
        "name": "Google Maps Platform API Overview",
        "description": "Overview of the available Google Maps Platform APIs and their capabilities",
        "mimeType": "text/markdown",
    },
    {
        "uri": "google-maps://docs/place-types",
        "name": "Google Places API Types Reference",
        "description": "Place types supported by the Google Places API",
        "mimeType": "application/json",
    },
    {
        "uri": "google-maps://docs/travel-modes",
        "name": "Routing Travel Modes",
        "description": "Available travel modes for routing and directions",
        "mimeType": "application/json",
    },
    {
        "uri": "google-maps://docs/field-masks",
        "name": "Places API Field Masks",
        "description": "Field mask reference for optimizing Places API requests",
        "mimeType": "application/json",
    },
    {
        "uri": "google-maps://examples/common-queries",
        "name": "Common Query Examples",
        "description": "Examples of common geocoding, places and routing queries",
        "mimeType": "application/json",
    },
]

API_OVERVIEW = """# Google Maps Platform APIs

## Places API (New)
- **Text Search**: Find places using natural language queries
- **Nearby Search**: Discover places within a specified area
- **Place Details**: Get detailed information about a specific place
- **Autocomplete**: Provide search suggestions as users type
- **Photos**: Build place photo URLs

## Routes API v2
- **Compute Routes**: Calculate routes between locations
- **Distance Matrix**: Travel times and distances for origin/destination pairs
- **Traffic-aware routing**: Real-time traffic consideration
- **Alternative routes**: Multiple route options

## Geocoding API
- **Forward Geocoding**: Convert addresses to coordinates
- **Reverse Geocoding**: Convert coordinates to addresses

## Utility APIs
- **Elevation API**: Elevation data for locations or paths
- **Time Zone API**: Time zone information for coordinates
- **Geolocation API**: Estimate location from WiFi/cell tower data
- **Roads API**: Snap coordinates to the road network
"""

PLACE_TYPES = {
    "accounting": "Accounting services",
    "airport": "Airports",
    "amusement_park": "Amusement parks",
    "aquarium": "Aquariums",
    "art_gallery": "Art galleries",
    "atm": "ATMs",
    "bakery": "Bakeries",
    "bank": "Banks",
    "bar": "Bars and pubs",
    "beauty_salon": "Beauty salons",
    "bicycle_store": "Bicycle stores",
    "book_store": "Book stores",
    "bowling_alley": "Bowling alleys",
    "bus_station": "Bus stations",
    "cafe": "Cafes and coffee shops",
    "campground": "Campgrounds",
    "car_dealer": "Car dealerships",
    "car_rental": "Car rental agencies",
    "car_repair": "Car repair shops",
    "car_wash": "Car washes",
    "casino": "Casinos",
    "cemetery": "Cemeteries",
    "church": "Churches",
    "city_hall": "City halls",
    "clothing_store": "Clothing stores",
    "convenience_store": "Convenience stores",
    "courthouse": "Courthouses",
    "dentist": "Dentists",
    "department_store": "Department stores",
    "doctor": "Doctors and medical practices",
    "drugstore": "Drugstores and pharmacies",
    "electrician": "Electricians",
    "electronics_store": "Electronics stores",
    "embassy": "Embassies",
    "fire_station": "Fire stations",
    "florist": "Florists",
    "funeral_home": "Funeral homes",
    "furniture_store": "Furniture stores",
    "gas_station": "Gas stations",
    "gym": "Gyms and fitness centers",
    "hair_care": "Hair care services",
    "hardware_store": "Hardware stores",
    "hindu_temple": "Hindu temples",
    "home_goods_store": "Home goods stores",
    "hospital": "Hospitals",
    "insurance_agency": "Insurance agencies",
    "jewelry_store": "Jewelry stores",
    "laundry": "Laundromats",
    "lawyer": "Lawyers and law firms",
    "library": "Libraries",
    "light_rail_station": "Light rail stations",
    "liquor_store": "Liquor stores",
    "local_government_office": "Local government offices",
    "locksmith": "Locksmiths",
    "lodging": "Hotels and lodging",
    "meal_delivery": "Meal delivery services",
    "meal_takeaway": "Takeaway restaurants",
    "mosque": "Mosques",
    "movie_rental": "Movie rental stores",
    "movie_theater": "Movie theaters",
    "moving_company": "Moving companies",
    "museum": "Museums",
    "night_club": "Night clubs",
    "painter": "Painters",
    "park": "Parks",
    "parking": "Parking facilities",
    "pet_store": "Pet stores",
    "pharmacy": "Pharmacies",
    "physiotherapist": "Physiotherapists",
    "plumber": "Plumbers",
    "police": "Police stations",
    "post_office": "Post offices",
    "primary_school": "Primary schools",
    "real_estate_agency": "Real estate agencies",
    "restaurant": "Restaurants",
    "roofing_contractor": "Roofing contractors",
    "rv_park": "RV parks",
    "school": "Schools",
    "secondary_school": "Secondary schools",
    "shoe_store": "Shoe stores",
    "shopping_mall": "Shopping malls",
    "spa": "Spas",
    "stadium": "Stadiums",
    "storage": "Storage facilities",
    "store": "General stores",
    "subway_station": "Subway stations",
    "supermarket": "Supermarkets",
    "synagogue": "Synagogues",
    "taxi_stand": "Taxi stands",
    "tourist_attraction": "Tourist attractions",
    "train_station": "Train stations",
    "transit_station": "Transit stations",
    "travel_agency": "Travel agencies",
    "university": "Universities",
    "veterinary_care": "Veterinary care",
    "zoo": "Zoos",
}

TRAVEL_MODES = {
    "DRIVE": {
        "description": "Driving directions via roads",
        "supports_traffic": True,
        "supports_tolls": True,
        "supports_alternatives": True,
    },
    "WALK": {
        "description": "Walking directions via pedestrian paths",
        "supports_traffic": False,
        "supports_tolls": False,
        "supports_alternatives": True,
    },
    "BICYCLE": {
        "description": "Bicycling directions via bike paths and roads",
        "supports_traffic": False,
        "supports_tolls": False,
        "supports_alternatives": True,
    },
    "TRANSIT": {
        "description": "Public transportation directions",
        "supports_traffic": True,
        "supports_tolls": False,
        "supports_alternatives": True,
        "note": "Requires transit data availability in the region",
    },
}

FIELD_MASKS = {
    "basic_fields": ["place_id", "name", "types", "formatted_address"],
    "contact_fields": ["phone_number", "international_phone_number", "website"],
    "atmosphere_fields": ["price_level", "rating", "user_ratings_total"],
    "geometry_fields": ["location"],
    "photo_fields": ["photos"],
    "operational_fields": ["opening_hours", "regular_opening_hours", "business_status"],
    "review_fields": ["reviews", "editorial_summary"],
    "note": "Use field masks to optimize API costs by requesting only needed data",
}

COMMON_QUERIES = {
    "geocoding": [
        {"description": "Geocode a full address", "query": "1600 Amphitheatre Parkway, Mountain View, CA"},
        {"description": "Geocode a landmark", "query": "Golden Gate Bridge, San Francisco"},
        {"description": "Geocode with region bias", "query": "Paris", "region": "FR"},
    ],
    "places_search": [
        {"description": "Find restaurants nearby", "query": "restaurants near Times Square",
         "types": ["restaurant"]},
        {"description": "Find coffee shops with high rating", "query": "coffee shops",
         "min_rating": 4.0, "types": ["cafe"]},
        {"description": "Find open gas stations", "query": "gas stations",
         "open_now": True, "types": ["gas_station"]},
    ],
    "routing": [
        {"description": "Driving route with traffic", "origin": "San Francisco, CA",
         "destination": "Los Angeles, CA", "travel_mode": "DRIVE",
         "routing_preference": "TRAFFIC_AWARE"},
        {"description": "Walking route", "origin": {"lat": 37.7749, "lng": -122.4194},
         "destination": {"lat": 37.7849, "lng": -122.4094}, "travel_mode": "WALK"},
    ],
}

RESOURCE_CONTENT: Dict[str, Any] = {
    "google-maps://docs/api-overview": API_OVERVIEW,
    "google-maps://docs/place-types": PLACE_TYPES,
    "google-maps://docs/travel-modes": TRAVEL_MODES,
    "google-maps://docs/field-masks": FIELD_MASKS,
    "google-maps://examples/common-queries": COMMON_QUERIES,
}


def list_resources() -> List[Dict[str, str]]:
    """Descriptors (uri, name, description, mimeType) of every resource."""
    return [dict(resource) for resource in RESOURCES]


def get_resource_content(uri: str) -> str:
    """
    Text of a resource: markdown as-is, structured content as indented JSON.

    Raises:
        ResourceNotFoundError: If the URI is unknown
    """
    content = RESOURCE_CONTENT.get(uri)
    if content is None:
        raise ResourceNotFoundError(uri)
    if isinstance(content, str):
        return content
    return json.dumps(content, indent=2)
