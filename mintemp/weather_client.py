"""Open-Meteo geocoding and historical archive client."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

import requests

from .config import (
    ARCHIVE_API_URL,
    ARCHIVE_TIMEZONE,
    ARCHIVE_UNITS,
    DAILY_VARIABLES,
    GEOCODING_API_URL,
    HOURLY_SNOW_DEPTH,
    REQUEST_TIMEOUT_SECONDS,
    WINDOW_DAYS,
)
from .errors import LocationNotFound, TransportError
from .feature_engineering import history_date_range, matrix_from_history
from .preprocessing import MeasurementMatrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None
    timezone: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name}, {self.country}" if self.country else self.name


class OpenMeteoClient:
    """
    Client for the two Open-Meteo endpoints used by the city search.

    No retries: a failed call is reported once as ``TransportError``.
    """

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: float = REQUEST_TIMEOUT_SECONDS,
                 geocoding_url: str = GEOCODING_API_URL,
                 archive_url: str = ARCHIVE_API_URL):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.geocoding_url = geocoding_url
        self.archive_url = archive_url

    def _get_json(self, url: str, params: Dict[str, Any], what: str) -> Dict[str, Any]:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            reason = _provider_reason(e.response)
            logger.warning(f"{what} request rejected: {reason}")
            raise TransportError(f"{what} request failed: {reason}") from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"{what} request failed: {e}")
            raise TransportError(f"{what} request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{what} returned invalid JSON") from e

    def search_city(self, name: str) -> Location:
        """
        Resolve a free-text place name to its best match.

        Raises:
        -------
        LocationNotFound
            The provider returned no candidate
        TransportError
            The request itself failed
        """
        query = name.strip()
        if not query:
            raise LocationNotFound(name)

        data = self._get_json(
            self.geocoding_url,
            {'name': query, 'count': 1, 'language': 'en', 'format': 'json'},
            'Geocoding',
        )
        results = data.get('results') or []
        if not results:
            raise LocationNotFound(query)

        best = results[0]
        location = Location(
            name=best.get('name', query),
            latitude=float(best['latitude']),
            longitude=float(best['longitude']),
            country=best.get('country'),
            timezone=best.get('timezone'),
        )
        logger.info(f"Resolved {query!r} to {location.label} ({location.latitude}, {location.longitude})")
        return location

    def fetch_daily_history(self, latitude: float, longitude: float,
                            start_date: date, end_date: date) -> Dict[str, Any]:
        """Fetch daily observations (plus hourly snow depth) for a date range."""
        params = {
            'latitude': latitude,
            'longitude': longitude,
            'start_date': start_date.isoformat(),
            'end_date': end_date.isoformat(),
            'daily': ','.join(DAILY_VARIABLES.values()),
            'hourly': HOURLY_SNOW_DEPTH,
            'timezone': ARCHIVE_TIMEZONE,
        }
        params.update(ARCHIVE_UNITS)
        return self._get_json(self.archive_url, params, 'Historical weather')

    def fetch_city_window(self, name: str, today: Optional[date] = None,
                          window: int = WINDOW_DAYS):
        """
        Geocode a city and build its measurement window ending yesterday.

        Returns:
        --------
        location, matrix : Location, MeasurementMatrix
        """
        location = self.search_city(name)
        start_date, end_date = history_date_range(today, window)
        payload = self.fetch_daily_history(location.latitude, location.longitude,
                                           start_date, end_date)
        matrix: MeasurementMatrix = matrix_from_history(payload, window)
        return location, matrix


def _provider_reason(response) -> str:
    if response is None:
        return "no response"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get('reason'), str):
        return body['reason']
    return f"HTTP {response.status_code}"
