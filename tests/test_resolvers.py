from __future__ import annotations

from types import SimpleNamespace

import geoip2.database
import geoip2.errors
import pytest
from maxminddb import InvalidDatabaseError

from eventgate.services.geo import GeoData, GeoResolverError, UnavailableGeoResolver, create_geo_resolver
from eventgate.services.preprocessor import ApiPreprocessor
from eventgate.services.useragent import ParsedUa, UserAgentResolver
from tests.stubs import CHROME_UA, StubUaResolver


GOOGLEBOT_UA = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"


def test_missing_maxmind_database_raises(tmp_path):
    with pytest.raises(GeoResolverError):
        create_geo_resolver(tmp_path / "GeoLite2-City.mmdb")


def test_maxmind_directory_without_database_raises(tmp_path):
    with pytest.raises(GeoResolverError):
        create_geo_resolver(tmp_path)


def test_empty_maxmind_path_raises():
    with pytest.raises(GeoResolverError):
        create_geo_resolver("")


def test_corrupted_maxmind_database_raises(tmp_path):
    db = tmp_path / "GeoLite2-City.mmdb"
    db.write_bytes(b"definitely not a maxmind database")
    with pytest.raises(GeoResolverError):
        create_geo_resolver(db)


def test_unavailable_resolver_returns_empty_data():
    resolver = UnavailableGeoResolver()
    assert resolver.available is False
    assert resolver.resolve("95.82.232.185") == GeoData()


def test_user_agent_resolver_parses_browser_and_os():
    parsed = UserAgentResolver().resolve(CHROME_UA)
    assert isinstance(parsed, ParsedUa)
    assert parsed.ua_family == "Chrome"
    assert parsed.ua_version.startswith("120")
    assert parsed.os_family == "Mac OS X"
    assert parsed.bot is False


def test_user_agent_resolver_detects_bots():
    assert UserAgentResolver().resolve(GOOGLEBOT_UA).bot is True


def test_user_agent_resolver_caches_results():
    resolver = UserAgentResolver(cache_size=8)
    assert resolver.resolve(CHROME_UA) is resolver.resolve(CHROME_UA)


def test_user_agent_resolver_never_raises_on_garbage():
    parsed = UserAgentResolver().resolve("")
    assert isinstance(parsed, ParsedUa)


def _city_response():
    return SimpleNamespace(
        country=SimpleNamespace(iso_code="RU"),
        subdivisions=SimpleNamespace(most_specific=SimpleNamespace(iso_code="MOW")),
        city=SimpleNamespace(name="Moscow"),
        postal=SimpleNamespace(code="101000"),
        location=SimpleNamespace(latitude=55.7522, longitude=37.6156),
    )


class FakeReader:
    def __init__(self, *, response=None, error=None):
        self.response = response
        self.error = error
        self.closed = False

    def city(self, ip):
        if self.error:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture
def install_reader(monkeypatch, tmp_path):
    def _install(reader):
        monkeypatch.setattr(geoip2.database, "Reader", lambda path: reader)
        return create_geo_resolver(tmp_path / "GeoLite2-City.mmdb")

    return _install


def test_maxmind_lookup_maps_city_fields(install_reader):
    reader = FakeReader(response=_city_response())
    resolver = install_reader(reader)

    assert resolver.available is True
    assert resolver.resolve("95.82.232.185") == GeoData(
        country="RU", region="MOW", city="Moscow", zip="101000", latitude=55.7522, longitude=37.6156
    )

    resolver.close()
    assert reader.closed is True


def test_maxmind_lookup_with_missing_fields(install_reader):
    response = _city_response()
    response.city.name = None
    response.postal.code = None
    response.location.latitude = None
    response.location.longitude = None

    data = install_reader(FakeReader(response=response)).resolve("95.82.232.185")

    assert data == GeoData(country="RU", region="MOW")


@pytest.mark.parametrize(
    "error",
    [
        geoip2.errors.AddressNotFoundError("not found"),
        InvalidDatabaseError("The MaxMind DB record is not a map"),
        ValueError("'x' does not appear to be an IPv4 or IPv6 address"),
    ],
)
def test_maxmind_lookup_errors_become_resolver_errors(install_reader, error):
    resolver = install_reader(FakeReader(error=error))
    with pytest.raises(GeoResolverError):
        resolver.resolve("95.82.232.185")


def test_corrupted_record_does_not_abort_preprocessing(install_reader):
    resolver = install_reader(FakeReader(error=InvalidDatabaseError("The MaxMind DB record is not a map")))
    preprocessor = ApiPreprocessor(resolver, StubUaResolver())

    fact = preprocessor.preprocess({"device_ctx": {"ip": "95.82.232.185"}})

    assert fact["src"] == "api"
    assert fact["device_ctx"]["geo"] is None
