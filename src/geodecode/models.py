"""
Data model for the reverse geocoder.

This module defines the point records held by the geocoder and the
lightweight keys stored in the spatial index. Coordinates are plain
WGS84 degrees: latitude in [-90, +90] and longitude in [-180, +180].
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


MIN_LAT = -90.0
MAX_LAT = 90.0
MIN_LON = -180.0
MAX_LON = 180.0

Coordinate = Tuple[float, float]


def is_valid_coordinate(lat: float, lon: float) -> bool:
    """
    Check that a coordinate lies within the WGS84 ranges.

    Bounds are inclusive. NaN never compares in range, so it is rejected.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees

    Returns:
        True if lat is in [-90, 90] and lon is in [-180, 180]
    """
    return MIN_LAT <= lat <= MAX_LAT and MIN_LON <= lon <= MAX_LON


def squared_distance(a: Coordinate, b: Coordinate) -> float:
    """
    Planar squared distance between two (lat, lon) pairs.

    The square root is never taken: ordering is all the search needs.
    """
    dlat = a[0] - b[0]
    dlon = a[1] - b[1]
    return dlat * dlat + dlon * dlon


@dataclass(frozen=True)
class Location:
    """
    A single entry of the reference dataset.

    `country` is empty when loaded; the geocoder fills it in on the
    copies it returns from queries.
    """
    lat: float
    lon: float
    city: str
    admin1: str = ""
    admin2: str = ""
    cc: str = ""  # ISO 3166-1 alpha-2
    country: str = ""

    def __post_init__(self):
        if not is_valid_coordinate(self.lat, self.lon):
            raise ValueError(
                f"Invalid location coordinates: lat={self.lat}, lon={self.lon}"
            )

    @property
    def coordinate(self) -> Coordinate:
        """The (lat, lon) pair of this location."""
        return self.lat, self.lon


@dataclass(frozen=True)
class IndexKey:
    """
    What the spatial index stores for each location.

    Pairs the searched coordinate with the position of the owning
    Location in the dataset, so tree nodes never copy full records.
    """
    coord: Coordinate
    index: int

    def value(self, dim: int) -> float:
        """Coordinate value along a split dimension (0 = lat, 1 = lon)."""
        return self.coord[dim]
