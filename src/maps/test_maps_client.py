"""
Tests for the client operations, the orchestrator workflows and the static
reference resources.

The executor (or the whole client, for workflow tests) is replaced by a
MagicMock so only request shaping and response handling are exercised.
"""

import json
import os
from unittest.mock import MagicMock, patch

import pytest

from src.config.config_module import ConfigError

from .maps_client import (
    GoogleMapsClient,
    PLACES_DETAILS_FIELD_MASK,
    PLACES_SEARCH_FIELD_MASK,
    ROUTES_FIELD_MASK,
)
from .maps_config import ApiSurface, RateLimitConfig
from .maps_errors import MapsApiError, ResourceNotFoundError
from .maps_resources import get_resource_content, list_resources
from .maps_types import Coordinate, GeocodeResult, PlaceResult
from .maps_workflow import MapsOrchestrator, is_valid_public_ip


# ==================== FIXTURES ====================

@pytest.fixture(autouse=True)
def mock_logging():
    """Silence the log helpers of the client and workflow modules."""
    with patch('src.maps.maps_client.log_info'):
        with patch('src.maps.maps_workflow.log_info'):
            with patch('src.maps.maps_workflow.log_warning') as workflow_warning:
                yield {'workflow_warning': workflow_warning}


@pytest.fixture
def executor():
    executor = MagicMock()
    executor.rate_limit = RateLimitConfig()
    return executor


@pytest.fixture
def client(executor):
    return GoogleMapsClient(executor=executor)


@pytest.fixture
def maps_client():
    """Client stand-in for orchestrator tests."""
    return MagicMock()


@pytest.fixture
def orchestrator(maps_client):
    return MapsOrchestrator(maps_client=maps_client)


def place(name, lat, lng, types=None, place_id=None):
    return PlaceResult(
        id=place_id or name.lower(),
        name=name,
        location=Coordinate(lat=lat, lng=lng),
        types=types,
    )


# ==================== CLIENT ====================

class TestClientInit:
    """Test client construction."""

    @patch.dict(os.environ)
    def test_missing_api_key(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)

        with pytest.raises(ConfigError):
            GoogleMapsClient()

    @patch.dict(os.environ)
    @patch('src.maps.maps_client.RequestExecutor')
    def test_builds_executor_from_environment(self, mock_executor, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "env-key")
        rate_limit = RateLimitConfig(enabled=False)

        client = GoogleMapsClient(rate_limit=rate_limit)

        mock_executor.assert_called_once_with("env-key", rate_limit=rate_limit)
        assert client.executor is mock_executor.return_value

    @patch.dict(os.environ)
    @patch('src.maps.maps_client.RequestExecutor')
    def test_reads_api_key_from_dotenv_file(self, mock_executor, monkeypatch, tmp_path):
        (tmp_path / ".env").write_text("GOOGLE_MAPS_API_KEY=dotenv-key\nGOOGLE_MAPS_RATE_LIMIT_MAX_REQUESTS=7\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)

        GoogleMapsClient()

        mock_executor.assert_called_once_with("dotenv-key", rate_limit=None)
        assert os.environ["GOOGLE_MAPS_RATE_LIMIT_MAX_REQUESTS"] == "7"

    @patch('src.maps.maps_client.load_config')
    @patch('src.maps.maps_client.RequestExecutor')
    def test_explicit_key_skips_dotenv(self, mock_executor, mock_load_config):
        GoogleMapsClient(api_key="explicit-key")

        mock_load_config.assert_not_called()
        mock_executor.assert_called_once_with("explicit-key", rate_limit=None)


class TestGeocoding:
    """Test geocoding operations."""

    def test_geocode_search(self, client, executor):
        executor.execute.return_value = {
            "status": "OK",
            "results": [{
                "formatted_address": "Paris, France",
                "geometry": {"location": {"lat": 48.8566, "lng": 2.3522}},
                "place_id": "paris",
                "types": ["locality"],
            }],
        }

        results = client.geocode_search("Paris", region="fr")

        executor.execute.assert_called_once_with(
            "/geocode/json",
            {"address": "Paris", "region": "fr", "language": None},
            cache_ttl=300,
        )
        assert results == [GeocodeResult(
            formatted_address="Paris, France",
            location=Coordinate(lat=48.8566, lng=2.3522),
            place_id="paris",
            types=["locality"],
        )]

    def test_geocode_search_propagates_errors(self, client, executor):
        executor.execute.side_effect = MapsApiError("ZERO_RESULTS", "API request failed")

        with pytest.raises(MapsApiError) as exc_info:
            client.geocode_search("zzzz")

        assert exc_info.value.kind == "ZERO_RESULTS"

    def test_geocode_reverse_reports_queried_point(self, client, executor):
        executor.execute.return_value = {
            "status": "OK",
            "results": [{
                "formatted_address": "1600 Amphitheatre Pkwy",
                "geometry": {"location": {"lat": 37.42, "lng": -122.08}},
            }],
        }

        results = client.geocode_reverse(37.4224, -122.0842, language="en")

        executor.execute.assert_called_once_with(
            "/geocode/json",
            {"latlng": "37.4224,-122.0842", "language": "en"},
            cache_ttl=300,
        )
        assert results[0].location == Coordinate(lat=37.4224, lng=-122.0842)


class TestPlaces:
    """Test Places API (New) operations."""

    def test_places_search_text_body(self, client, executor):
        executor.execute.return_value = {"places": [{"id": "a", "displayName": {"text": "Cafe A"}}]}

        results = client.places_search_text(
            "coffee",
            included_types=["cafe"],
            min_rating=4.0,
            open_now=True,
            location_bias={"circle": {"center": {"lat": 37.7, "lng": -122.4}, "radius_meters": 1000}},
            language="en",
            max_results=5,
        )

        args, kwargs = executor.execute.call_args
        assert args == ("/v1/places:searchText",)
        assert kwargs["method"] == "POST"
        assert kwargs["surface"] is ApiSurface.PLACES
        assert kwargs["field_mask"] == PLACES_SEARCH_FIELD_MASK
        assert kwargs["cache_ttl"] == 60
        assert kwargs["body"] == {
            "textQuery": "coffee",
            "includedTypes": ["cafe"],
            "openNow": True,
            "minRating": 4.0,
            "locationBias": {"circle": {"center": {"latitude": 37.7, "longitude": -122.4}, "radius": 1000}},
            "languageCode": "en",
            "maxResultCount": 5,
        }
        assert [p.name for p in results] == ["Cafe A"]

    def test_places_search_text_minimal_body(self, client, executor):
        executor.execute.return_value = {}

        assert client.places_search_text("pizza", included_types=[], open_now=False) == []
        assert executor.execute.call_args[1]["body"] == {"textQuery": "pizza", "openNow": False}

    def test_places_nearby(self, client, executor):
        executor.execute.return_value = {"places": []}

        client.places_nearby({"lat": 1.0, "lng": 2.0}, 500, included_types=["park"], max_results=3)

        args, kwargs = executor.execute.call_args
        assert args == ("/v1/places:searchNearby",)
        assert kwargs["body"] == {
            "locationRestriction": {
                "circle": {"center": {"latitude": 1.0, "longitude": 2.0}, "radius": 500}
            },
            "includedTypes": ["park"],
            "maxResultCount": 3,
        }

    def test_places_nearby_requires_coordinate(self, client, executor):
        with pytest.raises(MapsApiError) as exc_info:
            client.places_nearby({"address": "Paris"}, 500)

        assert exc_info.value.kind == "INVALID_ARGUMENT"
        executor.execute.assert_not_called()

    def test_places_autocomplete_is_not_cached(self, client, executor):
        executor.execute.return_value = {"suggestions": [{"placePrediction": {"placeId": "x"}}]}

        suggestions = client.places_autocomplete("caf", session_token="tok", included_types=["cafe"])

        args, kwargs = executor.execute.call_args
        assert args == ("/v1/places:autocomplete",)
        assert "cache_ttl" not in kwargs
        assert kwargs["body"] == {"input": "caf", "sessionToken": "tok", "includedTypes": ["cafe"]}
        assert suggestions == [{"placePrediction": {"placeId": "x"}}]

    def test_places_details_default_mask(self, client, executor):
        executor.execute.return_value = {"id": "abc", "displayName": {"text": "Louvre"}}

        result = client.places_details("abc", language="fr")

        args, kwargs = executor.execute.call_args
        assert args == ("/v1/places/abc", {"languageCode": "fr", "regionCode": None, "sessionToken": None})
        assert kwargs["field_mask"] == PLACES_DETAILS_FIELD_MASK
        assert kwargs["cache_ttl"] == 300
        assert result.name == "Louvre"

    def test_places_details_custom_fields(self, client, executor):
        executor.execute.return_value = {"id": "abc"}

        client.places_details("abc", fields=["name", "rating"])

        assert executor.execute.call_args[1]["field_mask"] == "id,displayName,rating"

    def test_places_photo_url(self, client, executor):
        executor.build_signed_url.return_value = "https://example/photo"

        url = client.places_photo_url("ref123", max_width=400)

        executor.build_signed_url.assert_called_once_with(
            "/place/photo", {"photoreference": "ref123", "maxwidth": 400}
        )
        assert url == "https://example/photo"
        executor.execute.assert_not_called()


class TestRoutes:
    """Test Routes API operations."""

    def test_routes_compute(self, client, executor):
        executor.execute.return_value = {"routes": [{"distanceMeters": 1200, "duration": "300s"}]}

        result = client.routes_compute(
            {"address": "San Francisco, CA"},
            {"lat": 37.8, "lng": -122.27},
            waypoints=[{"location": {"address": "Oakland"}, "via": True}, {"lat": 1, "lng": 2}],
            avoid_tolls=True,
        )

        args, kwargs = executor.execute.call_args
        assert args == ("/directions/v2:computeRoutes",)
        assert kwargs["surface"] is ApiSurface.ROUTES
        assert kwargs["field_mask"] == ROUTES_FIELD_MASK
        assert "cache_ttl" not in kwargs
        assert kwargs["body"] == {
            "origin": {"location": {"address": "San Francisco, CA"}},
            "destination": {"location": {"latLng": {"latitude": 37.8, "longitude": -122.27}}},
            "travelMode": "DRIVE",
            "routingPreference": "TRAFFIC_AWARE",
            "intermediates": [
                {"location": {"address": "Oakland"}, "via": True},
                {"location": {"latLng": {"latitude": 1.0, "longitude": 2.0}}},
            ],
            "routeModifiers": {"avoidTolls": True},
        }
        assert result["routes"][0].distance_meters == 1200
        assert result["routes"][0].duration_seconds == 300

    def test_routes_compute_invalid_origin(self, client, executor):
        with pytest.raises(MapsApiError):
            client.routes_compute("not a location ref", {"address": "x"})

        executor.execute.assert_not_called()

    def test_routes_matrix(self, client, executor):
        executor.execute.return_value = [{"originIndex": 0, "destinationIndex": 0}]

        result = client.routes_matrix([{"address": "A"}], [{"lat": 1, "lng": 2}], travel_mode="WALK")

        args, kwargs = executor.execute.call_args
        assert args == ("/distanceMatrix/v2:computeRouteMatrix",)
        assert kwargs["field_mask"] == "*"
        assert kwargs["body"]["origins"] == [{"waypoint": {"location": {"address": "A"}}}]
        assert kwargs["body"]["travelMode"] == "WALK"
        assert result == [{"originIndex": 0, "destinationIndex": 0}]


class TestUtilities:
    """Test elevation, timezone, geolocation and roads operations."""

    def test_elevation_locations_win_over_path(self, client, executor):
        executor.execute.return_value = {"status": "OK", "results": [{"elevation": 10.5}]}

        results = client.elevation_get(
            locations=[{"lat": 1, "lng": 2}, {"lat": 3, "lng": 4}],
            path="5,6|7,8",
            samples=4,
        )

        executor.execute.assert_called_once_with("/elevation/json", {"locations": "1,2|3,4"}, cache_ttl=300)
        assert results == [{"elevation": 10.5}]

    def test_elevation_path(self, client, executor):
        executor.execute.return_value = {"status": "OK", "results": []}

        client.elevation_get(path="5,6|7,8", samples=4)

        executor.execute.assert_called_once_with(
            "/elevation/json", {"path": "5,6|7,8", "samples": 4}, cache_ttl=300
        )

    def test_timezone(self, client, executor):
        executor.execute.return_value = {"status": "OK", "timeZoneId": "Europe/Paris"}

        result = client.timezone_get(48.85, 2.35, timestamp=1700000000)

        executor.execute.assert_called_once_with(
            "/timezone/json",
            {"location": "48.85,2.35", "timestamp": 1700000000, "language": None},
            cache_ttl=3600,
        )
        assert result["timeZoneId"] == "Europe/Paris"

    @patch('src.maps.maps_client.time.time', return_value=1234.9)
    def test_timezone_defaults_to_now(self, mock_time, client, executor):
        executor.execute.return_value = {"status": "OK"}

        client.timezone_get(0, 0)

        assert executor.execute.call_args[0][1]["timestamp"] == 1234

    @pytest.mark.parametrize("consider_ip, expected", [(None, True), (True, True), (False, False)])
    def test_geolocation_consider_ip(self, client, executor, consider_ip, expected):
        executor.execute.return_value = {"location": {"lat": 1, "lng": 2}, "accuracy": 100}

        client.geolocation_estimate(consider_ip=consider_ip)

        args, kwargs = executor.execute.call_args
        assert args == ("/geolocation/v1/geolocate",)
        assert kwargs["surface"] is ApiSurface.GEOLOCATION
        assert kwargs["body"] == {"considerIp": expected}

    def test_geolocation_with_signals(self, client, executor):
        executor.execute.return_value = {}
        wifi = [{"macAddress": "00:25:9c:cf:1c:ac", "signalStrength": -43}]

        client.geolocation_estimate(wifi_access_points=wifi)

        assert executor.execute.call_args[1]["body"] == {"considerIp": True, "wifiAccessPoints": wifi}

    def test_roads_nearest(self, client, executor):
        executor.execute.return_value = {"snappedPoints": []}

        client.roads_nearest([{"lat": 60.17, "lng": 24.94}])

        executor.execute.assert_called_once_with(
            "/v1/nearestRoads",
            {"points": "60.17,24.94", "travelMode": None},
            surface=ApiSurface.ROADS,
        )


# ==================== WORKFLOWS ====================

class TestIpValidation:
    """Test IP override validation."""

    @pytest.mark.parametrize("value", ["8.8.8.8", "172.32.0.1", "2001:db8::1", "::1"])
    def test_accepted(self, value):
        assert is_valid_public_ip(value) is True

    @pytest.mark.parametrize("value", [
        "10.1.2.3", "127.0.0.1", "172.16.0.1", "172.31.255.255", "192.168.1.1",
        "256.1.1.1", "not-an-ip", "",
    ])
    def test_rejected(self, value):
        assert is_valid_public_ip(value) is False


class TestFindNearby:
    """Test the nearby search workflow."""

    def test_coordinate_origin_sorted_by_distance(self, orchestrator, maps_client):
        maps_client.places_nearby.return_value = [
            place("Far Town", 38.5, -122.4, ["locality"]),
            place("Near Town", 37.8, -122.4, ["locality", "political"]),
        ]

        result = orchestrator.find_nearby({"lat": 37.7749, "lng": -122.4194}, "cities")

        maps_client.geocode_search.assert_not_called()
        maps_client.places_nearby.assert_called_once_with(
            Coordinate(lat=37.7749, lng=-122.4194),
            30000,
            included_types=["locality", "administrative_area_level_1"],
            max_results=20,
            language=None,
            region=None,
        )
        names = [item.name for item in result["results"]]
        assert names == ["Near Town", "Far Town"]
        assert result["results"][0].kind == "locality"
        assert result["results"][0].distance_meters < result["results"][1].distance_meters
        assert result["next_page_token"] is None

    def test_address_origin_is_geocoded(self, orchestrator, maps_client):
        maps_client.geocode_search.return_value = [
            GeocodeResult(formatted_address="Paris", location=Coordinate(lat=48.85, lng=2.35))
        ]
        maps_client.places_nearby.return_value = []

        result = orchestrator.find_nearby({"address": "Paris"}, "towns", radius_meters=1000, max_results=5)

        maps_client.geocode_search.assert_called_once_with("Paris")
        assert result["origin"] == Coordinate(lat=48.85, lng=2.35)
        assert maps_client.places_nearby.call_args[0][1] == 1000
        assert maps_client.places_nearby.call_args[1]["max_results"] == 5

    def test_unresolvable_address(self, orchestrator, maps_client):
        maps_client.geocode_search.return_value = []

        with pytest.raises(MapsApiError) as exc_info:
            orchestrator.find_nearby({"address": "Atlantis"}, "cities")

        assert exc_info.value.kind == "GEOCODE_FAILED"
        maps_client.places_nearby.assert_not_called()

    def test_pois_default_type(self, orchestrator, maps_client):
        maps_client.places_nearby.return_value = [place("Thing", 1.0, 2.0)]

        result = orchestrator.find_nearby({"lat": 1.0, "lng": 2.0}, "pois")

        assert maps_client.places_nearby.call_args[1]["included_types"] == ["point_of_interest"]
        assert result["results"][0].kind == "unknown"
        assert result["results"][0].distance_meters == 0

    def test_custom_types(self, orchestrator, maps_client):
        maps_client.places_nearby.return_value = []

        orchestrator.find_nearby({"lat": 1.0, "lng": 2.0}, "custom", included_types=["museum", "zoo"])

        assert maps_client.places_nearby.call_args[1]["included_types"] == ["museum", "zoo"]

    def test_unknown_category(self, orchestrator, maps_client):
        with pytest.raises(MapsApiError) as exc_info:
            orchestrator.find_nearby({"lat": 1.0, "lng": 2.0}, "villages")

        assert exc_info.value.kind == "INVALID_ARGUMENT"
        maps_client.places_nearby.assert_not_called()


class TestIpGeolocate:
    """Test the IP geolocation workflow."""

    def test_without_reverse_geocode(self, orchestrator, maps_client):
        maps_client.geolocation_estimate.return_value = {
            "location": {"lat": 37.42, "lng": -122.08},
            "accuracy": 1200,
        }

        result = orchestrator.ip_geolocate()

        maps_client.geolocation_estimate.assert_called_once_with(consider_ip=True)
        maps_client.geocode_reverse.assert_not_called()
        assert result == {
            "method": "geolocation_api_ip",
            "approximate": True,
            "location": {"lat": 37.42, "lng": -122.08, "accuracy_radius_meters": 1200},
            "normalized_address": None,
            "source": {"provider": "google", "reverse_geocode": False, "ip_override_attempted": False},
        }

    def test_default_accuracy(self, orchestrator, maps_client):
        maps_client.geolocation_estimate.return_value = {"location": {"lat": 1, "lng": 2}}

        result = orchestrator.ip_geolocate()

        assert result["location"]["accuracy_radius_meters"] == 25000

    def test_with_reverse_geocode(self, orchestrator, maps_client):
        maps_client.geolocation_estimate.return_value = {"location": {"lat": 48.85, "lng": 2.35}, "accuracy": 50}
        maps_client.geocode_reverse.return_value = [GeocodeResult(
            formatted_address="Paris, France",
            location=Coordinate(lat=48.85, lng=2.35),
            address_components=[{"long_name": "Paris"}],
        )]

        result = orchestrator.ip_geolocate(reverse_geocode=True, language="fr")

        maps_client.geocode_reverse.assert_called_once_with(48.85, 2.35, "fr")
        assert result["normalized_address"] == {
            "formatted_address": "Paris, France",
            "address_components": [{"long_name": "Paris"}],
        }
        assert result["source"]["reverse_geocode"] is True

    def test_reverse_geocode_without_results(self, orchestrator, maps_client, mock_logging):
        maps_client.geolocation_estimate.return_value = {"location": {"lat": 0, "lng": -160}}
        maps_client.geocode_reverse.side_effect = MapsApiError("ZERO_RESULTS", "API request failed")

        result = orchestrator.ip_geolocate(reverse_geocode=True)

        assert result["normalized_address"] is None
        mock_logging['workflow_warning'].assert_called_once()

    def test_reverse_geocode_failure_propagates(self, orchestrator, maps_client):
        maps_client.geolocation_estimate.return_value = {"location": {"lat": 0, "lng": 0}}
        maps_client.geocode_reverse.side_effect = MapsApiError("REQUEST_DENIED", "bad key")

        with pytest.raises(MapsApiError) as exc_info:
            orchestrator.ip_geolocate(reverse_geocode=True)

        assert exc_info.value.kind == "REQUEST_DENIED"

    def test_public_override_is_reported(self, orchestrator, maps_client):
        maps_client.geolocation_estimate.return_value = {"location": {"lat": 1, "lng": 2}}

        result = orchestrator.ip_geolocate(ip_override="8.8.8.8")

        assert result["source"]["ip_override_attempted"] is True

    def test_private_override_is_rejected(self, orchestrator, maps_client):
        with pytest.raises(MapsApiError) as exc_info:
            orchestrator.ip_geolocate(ip_override="192.168.0.10")

        assert exc_info.value.kind == "INVALID_IP"
        assert exc_info.value.context == {"ip": "192.168.0.10"}
        maps_client.geolocation_estimate.assert_not_called()


# ==================== RESOURCES ====================

class TestResources:
    """Test the static reference resources."""

    def test_list_resources(self):
        resources = list_resources()

        assert [r["uri"] for r in resources] == [
            "google-maps://docs/api-overview",
            "google-maps://docs/place-types",
            "google-maps://docs/travel-modes",
            "google-maps://docs/field-masks",
            "google-maps://examples/common-queries",
        ]
        assert all(set(r) == {"uri", "name", "description", "mimeType"} for r in resources)

    def test_list_resources_returns_copies(self):
        list_resources()[0]["name"] = "changed"

        assert list_resources()[0]["name"] != "changed"

    def test_markdown_content(self):
        content = get_resource_content("google-maps://docs/api-overview")

        assert content.startswith("# Google Maps Platform APIs")

    def test_json_content(self):
        place_types = json.loads(get_resource_content("google-maps://docs/place-types"))
        travel_modes = json.loads(get_resource_content("google-maps://docs/travel-modes"))

        assert place_types["restaurant"] == "Restaurants"
        assert set(travel_modes) == {"DRIVE", "WALK", "BICYCLE", "TRANSIT"}

    def test_unknown_resource(self):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            get_resource_content("google-maps://docs/unknown")

        assert exc_info.value.kind == "RESOURCE_NOT_FOUND"
        assert exc_info.value.to_dict()["message"] == "Resource not found: google-maps://docs/unknown"
