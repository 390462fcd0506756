"""Shared fixtures for geodecode tests."""

import pytest

from geodecode.countries import MappingCountryLookup
from geodecode.geocoder import ReverseGeocoder
from geodecode.loader import StaticLoader
from geodecode.models import Location


CITIES_CSV = """lat,lon,city,admin1,admin2,cc
42.57952,1.65362,El Tarter,Canillo,,AD
abc,1.0,Broken,,,XX
42.50729,1.53414,Andorra la Vella,Andorra la Vella,,AD
95.0,10.0,Too Far North,,,XX
"""


@pytest.fixture
def three_cities():
    """Locations A, B and C on the diagonal."""
    return [
        Location(0.0, 0.0, "A", "Alpha One", "Alpha Two", "AA"),
        Location(10.0, 10.0, "B", "Bravo One", "Bravo Two", "BB"),
        Location(-10.0, -10.0, "C", "Charlie One", "Charlie Two", "CC"),
    ]


@pytest.fixture
def country_names():
    return MappingCountryLookup({"AA": "Alphaland", "BB": "Bravoland", "CC": "Charlieland"})


@pytest.fixture
def geocoder(three_cities, country_names):
    return ReverseGeocoder(StaticLoader(three_cities), countries=country_names)


@pytest.fixture
def cities_csv(tmp_path):
    """A small cities CSV with two valid and two invalid rows."""
    path = tmp_path / "rg_cities1000.csv"
    path.write_text(CITIES_CSV)
    return path
