import pytest
import requests

from weather_forecast import owm_api
from weather_forecast.city_tables import CityTables, TW_CITY_MAP, TW_ISLANDS, COUNTRY_HINTS, DEFAULT_TABLES
from weather_forecast.geocode_resolver import resolve_location

from tests.fakes import FakeGeocoder


def _geo(name, lat, lon, zh=None):
    entry = {"name": name, "lat": lat, "lon": lon}
    if zh:
        entry["local_names"] = {"zh_tw": zh}
    return [entry]


def test_island_resolves_without_network():
    geocoder = FakeGeocoder()
    location = resolve_location("澎湖", geocoder)
    assert location.is_island
    assert (location.lat, location.lon) == (23.5711, 119.5793)
    assert geocoder.calls == []


def test_island_romanization_is_case_insensitive():
    location = resolve_location("Penghu", FakeGeocoder())
    assert location.display_name == "澎湖"


@pytest.mark.parametrize("name, island", list(TW_ISLANDS.items()))
def test_every_island_alias_resolves_to_fixed_coordinates(name, island):
    geocoder = FakeGeocoder()
    location = resolve_location(name, geocoder)
    assert location.is_island
    assert location.display_name == island.name
    assert (location.lat, location.lon) == (island.lat, island.lon)
    assert geocoder.calls == []


def test_taiwan_city_is_qualified_with_country_code():
    geocoder = FakeGeocoder({"Taichung,TW": _geo("Taichung", 24.14, 120.68, zh="臺中市")})
    location = resolve_location("Taichung", geocoder)
    assert geocoder.calls == ["Taichung,TW"]
    assert location.display_name == "臺中市"
    assert location.has_coordinates
    assert not location.is_island


def test_country_hint_is_used_for_ambiguous_city():
    geocoder = FakeGeocoder({"Tokyo,JP": _geo("Tokyo", 35.68, 139.76)})
    location = resolve_location("東京", geocoder)
    assert geocoder.calls == ["Tokyo,JP"]
    assert location.display_name == "Tokyo"


def test_failed_steps_fall_through_to_taiwan_qualified_lookup():
    tables = CityTables(
        tw_cities=TW_CITY_MAP,
        islands=TW_ISLANDS,
        country_hints={**COUNTRY_HINTS, "new taipei": "New Taipei,CN"},
    )
    geocoder = FakeGeocoder({"New Taipei,TW": _geo("New Taipei", 25.01, 121.46)})

    location = resolve_location("New Taipei", geocoder, tables)

    assert geocoder.calls == ["New Taipei", "New Taipei,CN", "New Taipei,TW"]
    assert (location.lat, location.lon) == (25.01, 121.46)
    assert location.resolved


def test_bare_lookup_is_the_last_remote_step():
    geocoder = FakeGeocoder({"Paris": _geo("Paris", 48.85, 2.35)})
    location = resolve_location("Paris", geocoder)
    assert geocoder.calls == ["Paris"]
    assert location.display_name == "Paris"


def test_unresolved_taiwan_city_keeps_country_qualifier():
    location = resolve_location("台南", FakeGeocoder())
    assert not location.resolved
    assert not location.has_coordinates
    assert location.query == "Tainan,TW"
    assert location.display_name == "台南"


def test_unresolved_foreign_city_uses_raw_string():
    location = resolve_location("Atlantis", FakeGeocoder(), DEFAULT_TABLES)
    assert location.query == "Atlantis"
    assert not location.resolved


class _FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.mark.parametrize("response", [
    _FakeResponse(status_code=500),
    _FakeResponse(payload=None),
    _FakeResponse(payload={"cod": 401}),
])
def test_geocode_direct_returns_empty_list_on_failure(monkeypatch, response):
    monkeypatch.setattr(owm_api.requests, "get", lambda *args, **kwargs: response)
    assert owm_api.geocode_direct("key", "Taipei,TW") == []


def test_get_forecast_data_returns_empty_dict_on_network_error(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError("offline")

    monkeypatch.setattr(owm_api.requests, "get", boom)
    assert owm_api.get_forecast_data("key", lat=25.0, lon=121.5) == {}
