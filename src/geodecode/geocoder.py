"""
Reverse geocoding service.

ReverseGeocoder owns the location dataset and the spatial index built
over it. The index is built lazily, exactly once, on the first query
(or explicit `ensure_loaded()`), however many threads arrive at the
same time. After that both are immutable and queries run without locks.
"""

import enum
import os
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .builder import SpatialIndex, build_index
from .countries import CountryLookup, PycountryLookup
from .duckdb_loader import DuckDBCSVLoader, DATA_ENV_VAR, default_data_path
from .errors import IndexInconsistencyError, LoaderError
from .kdtree import KDTree
from .loader import RecordLoader
from .log import logger, verbose_level
from .models import Coordinate, IndexKey, Location, is_valid_coordinate, squared_distance
from .sync import RunOnce


VERBOSE_ENV_VAR = "GEODECODE_VERBOSE"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GeocoderConfig:
    """Construction-time configuration for a ReverseGeocoder."""

    data_path: Optional[Path] = None
    """Dataset CSV (default: $GEODECODE_DATA or data/rg_cities1000.csv)."""

    verbose: bool = False
    """Log loading progress and rejected coordinates at INFO."""

    def __post_init__(self):
        if self.data_path is not None and not isinstance(self.data_path, Path):
            raise ValueError("data_path must be a pathlib.Path")
        if not isinstance(self.verbose, bool):
            raise ValueError("verbose must be a bool")

    @classmethod
    def from_env(cls) -> "GeocoderConfig":
        """Build a configuration from GEODECODE_DATA and GEODECODE_VERBOSE."""
        data = os.environ.get(DATA_ENV_VAR, "").strip()
        verbose = os.environ.get(VERBOSE_ENV_VAR, "").strip().lower() in _TRUTHY
        return cls(data_path=Path(data) if data else None, verbose=verbose)


class GeocoderState(enum.Enum):
    """Lifecycle of a ReverseGeocoder. EMPTY and READY are terminal."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    EMPTY = "empty"
    READY = "ready"


class ReverseGeocoder:
    """
    Finds the nearest known location to a coordinate.

    Distances are planar squared distances over raw (lat, lon) degrees,
    not great-circle distances.
    """

    def __init__(
        self,
        loader: RecordLoader,
        config: Optional[GeocoderConfig] = None,
        countries: Optional[CountryLookup] = None,
    ):
        """
        Initialize the geocoder. Nothing is loaded until first use.

        Args:
            loader: Supplies the dataset
            config: Geocoder configuration
            countries: Country name provider (default: PycountryLookup)
        """
        self.loader = loader
        self.config = config or GeocoderConfig()
        self.countries = countries if countries is not None else PycountryLookup()

        self._state = GeocoderState.UNLOADED
        self._locations: Tuple[Location, ...] = ()
        self._index: Optional[SpatialIndex] = None
        self._once = RunOnce(self._load)

    @classmethod
    def from_config(cls, config: Optional[GeocoderConfig] = None) -> "ReverseGeocoder":
        """
        Create a geocoder reading the GeoNames cities CSV through DuckDB.

        Args:
            config: Geocoder configuration (default: GeocoderConfig.from_env())

        Returns:
            Configured ReverseGeocoder instance
        """
        config = config or GeocoderConfig.from_env()
        loader = DuckDBCSVLoader(
            config.data_path or default_data_path(), verbose=config.verbose
        )
        return cls(loader, config)

    @property
    def state(self) -> GeocoderState:
        return self._state

    @property
    def locations(self) -> Tuple[Location, ...]:
        """The loaded dataset (empty until loaded)."""
        return self._locations

    def __len__(self) -> int:
        return len(self._locations)

    def _log(self, msg: str, *args) -> None:
        logger.log(verbose_level(self.config.verbose), msg, *args)

    def ensure_loaded(self) -> None:
        """Load the dataset and build the index if that has not happened yet."""
        self._once()

    def _load(self) -> None:
        """Load the dataset and build the index. Runs once per instance."""
        self._state = GeocoderState.LOADING
        self._log("Loading and processing geodata...")
        start_time = time.perf_counter()

        try:
            locations = self.loader.load()
        except (OSError, ValueError, LoaderError) as e:
            logger.error("Could not load geodata: %s", e)
            self._state = GeocoderState.EMPTY
            return
        except Exception:
            self._state = GeocoderState.EMPTY
            raise

        if not locations:
            logger.warning("No valid coordinates loaded.")
            self._state = GeocoderState.EMPTY
            return

        self._log("Loaded %d valid points.", len(locations))
        if len(locations) == 1:
            logger.warning("Only one valid coordinate loaded. KD-tree will not be built.")

        keys = [IndexKey(loc.coordinate, i) for i, loc in enumerate(locations)]
        index, stats = build_index(keys)

        self._locations = tuple(locations)
        self._index = index
        self._state = GeocoderState.READY

        self._log(
            "Data loaded, KD-tree built in %.2f seconds. %d locations indexed (depth %d).",
            time.perf_counter() - start_time, len(locations), stats.max_depth_reached,
        )

    @property
    def index_stats(self) -> Dict[str, int]:
        """Size and shape of the spatial index (all zero until loaded)."""
        index = self._index
        if isinstance(index, KDTree):
            return {"size": index.size, "nodes": index.node_count, "depth": index.depth}
        if isinstance(index, IndexKey):
            return {"size": 1, "nodes": 0, "depth": 0}
        return {"size": 0, "nodes": 0, "depth": 0}

    def _resolve(self, key: IndexKey) -> Location:
        if not 0 <= key.index < len(self._locations):
            logger.error("KD-tree returned invalid index %d", key.index)
            raise IndexInconsistencyError(
                f"Index {key.index} outside dataset of {len(self._locations)} locations"
            )
        return self._locations[key.index]

    def _nearest_key(self, lat: float, lon: float) -> Tuple[IndexKey, float]:
        index = self._index
        if isinstance(index, IndexKey):
            # A single location is the nearest to everything
            return index, squared_distance(index.coord, (lat, lon))
        if index is None:
            raise IndexInconsistencyError("Spatial index queried before it was built")
        return index.nearest(lat, lon)

    def _with_country(self, location: Location) -> Location:
        return replace(location, country=self.countries.name_for(location.cc))

    def _query_with_distance(
        self, coordinates: Sequence[Coordinate]
    ) -> Optional[List[Tuple[Location, float]]]:
        self.ensure_loaded()
        if self._state is not GeocoderState.READY:
            return []

        # Any invalid coordinate rejects the whole batch
        for lat, lon in coordinates:
            if not is_valid_coordinate(lat, lon):
                self._log(
                    "Invalid query coordinate received: lat=%.4f, lon=%.4f. Rejecting batch.",
                    lat, lon,
                )
                return None

        if not coordinates:
            return []

        results = []
        for lat, lon in coordinates:
            key, dist = self._nearest_key(lat, lon)
            results.append((self._with_country(self._resolve(key)), dist))
        return results

    def query(self, coordinates: Sequence[Coordinate]) -> Optional[List[Location]]:
        """
        Find the nearest location for each coordinate in a batch.

        Args:
            coordinates: Sequence of (lat, lon) pairs

        Returns:
            One Location per coordinate, in order, with `country` filled in.
            An empty list if the batch is empty or no data is loaded
            (whatever the coordinates).
            None if any coordinate is out of range: the whole batch is
            rejected rather than just the offending element.
        """
        results = self._query_with_distance(coordinates)
        if results is None:
            return None
        return [location for location, _ in results]

    def find_location(self, coordinate: Coordinate) -> Optional[Location]:
        """
        Find the nearest location to a single coordinate.

        Args:
            coordinate: (lat, lon) pair

        Returns:
            The nearest Location, or None if the coordinate is out of
            range or no data is loaded.
        """
        lat, lon = coordinate
        if not is_valid_coordinate(lat, lon):
            return None
        results = self.query([coordinate])
        if results:
            return results[0]
        return None

    def nearest(self, coordinate: Coordinate) -> Optional[Tuple[Location, float]]:
        """
        Like find_location, but also return the squared distance in degrees².

        Returns:
            Tuple of (Location, squared distance), or None
        """
        lat, lon = coordinate
        if not is_valid_coordinate(lat, lon):
            return None
        results = self._query_with_distance([coordinate])
        if results:
            return results[0]
        return None
