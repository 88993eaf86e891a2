"""Static city table used to resolve (country, city) to coordinates."""

import json
import logging
from typing import Any, Dict, Iterable, Mapping, Tuple

from pydantic import ValidationError

from weather_aggregator.weather.errors import UnknownCityError
from weather_aggregator.weather.models import Location, normalize_name

logger = logging.getLogger(__name__)


class CityResolver:
    """Read-only lookup of cities by normalized (country, city).

    The table is built once at startup and never mutated afterwards, so a
    single instance can be shared by every request.
    """

    def __init__(self, locations: Iterable[Location]):
        """Build the lookup table.

        Args:
            locations: Cities to register; a later duplicate replaces an earlier one
        """
        table: Dict[Tuple[str, str], Location] = {}
        for location in locations:
            key = self._key(location.country, location.city)
            if key in table:
                logger.warning(f"Duplicate city entry {location.country}/{location.city}, keeping the last one")
            table[key] = location
        self._table: Mapping[Tuple[str, str], Location] = table

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "CityResolver":
        """Build a resolver from raw city records.

        Records use the city table file layout:
        ``{"country": "US", "name": "Chicago", "lat": 41.85, "lng": -87.65, "keys": {...}}``

        Raises:
            ValueError: If a record is malformed
        """
        locations = []
        for index, record in enumerate(records):
            try:
                locations.append(
                    Location(
                        country=record["country"],
                        city=record["name"],
                        lat=record["lat"],
                        lon=record["lng"],
                        provider_keys=record.get("keys") or {},
                    )
                )
            except (KeyError, TypeError, AttributeError, ValidationError) as e:
                raise ValueError(f"Invalid city record #{index}: {e}") from e
        return cls(locations)

    @classmethod
    def from_file(cls, path: str) -> "CityResolver":
        """Load the city table from a JSON file.

        Args:
            path: Path to a JSON array of city records

        Returns:
            CityResolver over the file contents

        Raises:
            ValueError: If the file is not a JSON array of valid records
        """
        with open(path, encoding="utf-8") as f:
            records = json.load(f)

        if not isinstance(records, list):
            raise ValueError(f"City table {path} must be a JSON array")

        resolver = cls.from_records(records)
        logger.info(f"Loaded {len(resolver)} cities from {path}")
        return resolver

    @staticmethod
    def _key(country: str, city: str) -> Tuple[str, str]:
        return normalize_name(country), normalize_name(city)

    def resolve(self, country: str, city: str) -> Location:
        """Find a city in the table.

        Args:
            country: Country code, any case
            city: City name, any case and spacing

        Returns:
            The registered Location

        Raises:
            UnknownCityError: If the pair is not registered
        """
        location = self._table.get(self._key(country, city))
        if location is None:
            raise UnknownCityError(country, city)
        return location

    def __contains__(self, item: Tuple[str, str]) -> bool:
        country, city = item
        return self._key(country, city) in self._table

    def __len__(self) -> int:
        return len(self._table)
