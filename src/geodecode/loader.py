"""
Loader interface for the location dataset.

A loader supplies the geocoder with its records. Loaders are responsible
for dropping rows whose coordinates do not parse or fall outside the
WGS84 ranges; nothing invalid may reach the index builder.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Sequence

from .errors import LoaderError
from .log import logger, verbose_level
from .models import Location


REQUIRED_COLUMNS = ("lat", "lon", "city", "admin1", "admin2", "cc")


class RecordLoader(ABC):
    """
    Abstract base class for dataset loaders.

    The geocoder calls `load()` once, on first use.
    """

    @abstractmethod
    def load(self) -> List[Location]:
        """
        Load the dataset.

        Returns:
            Valid locations in source order (may be empty)

        Raises:
            LoaderError, OSError: If the source cannot be read
        """
        pass


class StaticLoader(RecordLoader):
    """
    Loader over an in-memory collection of locations.

    Useful for tests and for callers that already hold their data.
    """

    def __init__(self, records: Iterable[Location]):
        self._records = list(records)
        self.load_calls = 0

    def load(self) -> List[Location]:
        self.load_calls += 1
        return list(self._records)


def _cell(row: Sequence[Any], pos: int) -> str:
    value = row[pos] if pos < len(row) else None
    return "" if value is None else str(value)


def parse_rows(
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    verbose: bool = False,
) -> List[Location]:
    """
    Turn raw tabular rows into validated locations.

    Args:
        columns: Header names, in row order
        rows: Raw rows; cells may be text, numbers or None
        verbose: Log each skipped row at INFO instead of DEBUG

    Returns:
        Locations for every row with parseable in-range coordinates

    Raises:
        LoaderError: If a required column is missing from the header
    """
    col_map: Dict[str, int] = {}
    for i, name in enumerate(columns):
        col_map.setdefault(name, i)

    for required in REQUIRED_COLUMNS:
        if required not in col_map:
            raise LoaderError(f"Dataset missing required column: {required}")

    locations: List[Location] = []
    skipped = 0

    for row_num, row in enumerate(rows, start=1):
        lat_raw = _cell(row, col_map["lat"])
        lon_raw = _cell(row, col_map["lon"])
        try:
            location = Location(
                lat=float(lat_raw),
                lon=float(lon_raw),
                city=_cell(row, col_map["city"]),
                admin1=_cell(row, col_map["admin1"]),
                admin2=_cell(row, col_map["admin2"]),
                cc=_cell(row, col_map["cc"]),
            )
        except ValueError as e:
            skipped += 1
            logger.log(
                verbose_level(verbose),
                "Skipping row %d with invalid coordinates: lat=%r, lon=%r (%s)",
                row_num, lat_raw, lon_raw, e,
            )
            continue
        locations.append(location)

    if skipped:
        logger.log(verbose_level(verbose), "Skipped %d invalid rows", skipped)

    return locations
