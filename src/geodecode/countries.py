"""
Country code to country name lookup.

The geocoder calls a CountryLookup once per returned result to fill in
`Location.country` from the ISO 3166-1 alpha-2 code.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

import pycountry


class CountryLookup(ABC):
    """Abstract base class for country name providers."""

    @abstractmethod
    def name_for(self, cc: str) -> str:
        """
        Look up the display name for a country code.

        Args:
            cc: ISO 3166-1 alpha-2 code

        Returns:
            Country name, or "" when the code is unknown
        """
        pass


class PycountryLookup(CountryLookup):
    """Country names from the ISO 3166 database shipped with pycountry."""

    def name_for(self, cc: str) -> str:
        if not cc:
            return ""
        country = pycountry.countries.get(alpha_2=cc.upper())
        if country is None:
            return ""
        # Prefer the short common name where ISO 3166 has one
        return getattr(country, "common_name", country.name)


class MappingCountryLookup(CountryLookup):
    """
    Lookup wrapper for a plain dictionary.

    Codes are matched case-insensitively.
    """

    def __init__(self, names: Optional[Dict[str, str]] = None):
        self._names = {code.upper(): name for code, name in (names or {}).items()}

    def name_for(self, cc: str) -> str:
        return self._names.get(cc.upper(), "")
