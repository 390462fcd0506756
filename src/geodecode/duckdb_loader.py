"""
DuckDB-based loader for the GeoNames cities CSV.

This module reads `rg_cities1000.csv`-style files (columns lat, lon,
city, admin1, admin2, cc) through DuckDB's CSV reader and hands the rows
to the shared row parser for validation.
"""

import csv
import os
from pathlib import Path
from typing import List, Optional

import duckdb

from .errors import LoaderError
from .loader import RecordLoader, parse_rows
from .log import logger, verbose_level
from .models import Location


DATA_FILENAME = "rg_cities1000.csv"

# Default data directory (relative to package)
DEFAULT_DATA_DIR = Path(__file__).parent.parent.parent / "data"

DATA_ENV_VAR = "GEODECODE_DATA"


def default_data_path() -> Path:
    """
    Resolve the dataset location.

    Uses $GEODECODE_DATA when set, otherwise data/rg_cities1000.csv at
    the project root.
    """
    env_val = os.environ.get(DATA_ENV_VAR, "").strip()
    if env_val:
        return Path(env_val)
    return DEFAULT_DATA_DIR / DATA_FILENAME


class DuckDBCSVLoader(RecordLoader):
    """
    Loader implementation using DuckDB's `read_csv`.

    Every column is read as VARCHAR so that malformed coordinates reach
    the row parser (and get skipped) instead of failing type detection.
    """

    def __init__(self, csv_path: Optional[Path] = None, verbose: bool = False):
        """
        Initialize the loader.

        Args:
            csv_path: Path to the CSV file (default: default_data_path())
            verbose: Log progress and skipped rows at INFO
        """
        self.csv_path = Path(csv_path) if csv_path is not None else default_data_path()
        self.verbose = verbose

    def _read_header(self) -> List[str]:
        with open(self.csv_path, newline="", encoding="utf-8-sig", errors="replace") as f:
            header = next(csv.reader(f), None)
        if not header:
            raise LoaderError(f"Data file '{self.csv_path}' has no header row")
        return header

    def load(self) -> List[Location]:
        """
        Read and validate the CSV file.

        The dialect is fixed (comma separated, double quotes, header row)
        and the columns are taken from the header, so a malformed line
        cannot change how the rest of the file is parsed. Lines DuckDB
        cannot read (wrong field count, invalid UTF-8) are skipped.

        Returns:
            Valid locations in file order

        Raises:
            FileNotFoundError: If the file does not exist
            LoaderError: If DuckDB cannot read it or columns are missing
        """
        if not self.csv_path.exists():
            raise FileNotFoundError(f"Data file '{self.csv_path}' not found")

        logger.log(verbose_level(self.verbose), "Reading %s", self.csv_path)

        header = self._read_header()
        columns_literal = ", ".join(
            "'{}': 'VARCHAR'".format(name.replace("'", "''")) for name in header
        )
        path_literal = str(self.csv_path).replace("'", "''")

        con = duckdb.connect(":memory:")
        try:
            result = con.execute(f"""
                SELECT *
                FROM read_csv(
                    '{path_literal}',
                    auto_detect = false,
                    header = true,
                    delim = ',',
                    quote = '"',
                    escape = '"',
                    columns = {{{columns_literal}}},
                    store_rejects = true
                )
            """)
            columns = [desc[0] for desc in result.description]
            rows = result.fetchall()

            rejects = con.execute("""
                SELECT line, error_message
                FROM reject_errors
                ORDER BY line
            """).fetchall()
        except duckdb.Error as e:
            raise LoaderError(f"Could not read {self.csv_path}: {e}") from e
        finally:
            con.close()

        for line, message in rejects:
            logger.log(
                verbose_level(self.verbose),
                "Skipping line %d due to read error: %s", line, message,
            )
        if rejects:
            logger.warning("Skipped %d unreadable lines in %s", len(rejects), self.csv_path)

        return parse_rows(columns, rows, verbose=self.verbose)
