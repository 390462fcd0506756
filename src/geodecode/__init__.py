"""
geodecode: Offline reverse geocoding with a k-d tree.

This package finds the nearest city-like record in a fixed dataset for a
WGS84 (lat, lon) coordinate. Lookups use a balanced 2-d tree over the
raw coordinates and a planar squared-distance metric.
"""

__version__ = "0.1.0"

from .models import Location, IndexKey, is_valid_coordinate, squared_distance
from .kdtree import KDNode, KDTree
from .builder import KDTreeBuilder, BuilderStats, build_index
from .loader import RecordLoader, StaticLoader, parse_rows
from .duckdb_loader import DuckDBCSVLoader, default_data_path
from .countries import CountryLookup, PycountryLookup, MappingCountryLookup
from .errors import LoaderError, IndexInconsistencyError
from .geocoder import GeocoderConfig, GeocoderState, ReverseGeocoder

__all__ = [
    "Location",
    "IndexKey",
    "is_valid_coordinate",
    "squared_distance",
    "KDNode",
    "KDTree",
    "KDTreeBuilder",
    "BuilderStats",
    "build_index",
    "RecordLoader",
    "StaticLoader",
    "parse_rows",
    "DuckDBCSVLoader",
    "default_data_path",
    "CountryLookup",
    "PycountryLookup",
    "MappingCountryLookup",
    "LoaderError",
    "IndexInconsistencyError",
    "GeocoderConfig",
    "GeocoderState",
    "ReverseGeocoder",
]
