"""
Geocoding provider: place name -> coordinates.

Mapbox is tried first when a token is configured; Nominatim (OpenStreetMap,
no key) is the fallback and the default.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
from urllib.parse import quote

import requests

from .client import get_json, validate_coordinates
from .errors import ProviderError

logger = logging.getLogger(__name__)

PROVIDER = "geocoding"
MAPBOX_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places/{query}.json"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"


@dataclass
class Coordinates:
    lat: float
    lon: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _mapbox(location: str, token: str, timeout: float, session) -> Optional[Coordinates]:
    data = get_json(
        PROVIDER, "Mapbox Geocoding API", MAPBOX_URL.format(query=quote(location)),
        params={"access_token": token, "limit": 1}, timeout=timeout, session=session,
    )
    features = data.get("features") if isinstance(data, dict) else None
    if not features:
        return None
    lon, lat = features[0]["center"]
    return Coordinates(lat=float(lat), lon=float(lon))


def _nominatim(location: str, timeout: float, session) -> Optional[Coordinates]:
    data = get_json(
        PROVIDER, "Nominatim", NOMINATIM_URL,
        params={"q": location, "format": "json", "limit": 1}, timeout=timeout, session=session,
    )
    if not isinstance(data, list) or not data:
        return None
    return Coordinates(lat=float(data[0]["lat"]), lon=float(data[0]["lon"]))


def geocode_location(
    location: str,
    mapbox_token: Optional[str] = None,
    timeout: float = 15,
    session: Optional[requests.Session] = None,
) -> Coordinates:
    """
    Resolve a free-text location such as "Mumbai, India".

    Raises:
        ProviderError: If neither service finds the location
    """
    coordinates = None
    if mapbox_token:
        try:
            coordinates = _mapbox(location, mapbox_token, timeout, session)
        except (ProviderError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Mapbox geocoding failed, falling back to Nominatim: {e}")

    if coordinates is None:
        try:
            coordinates = _nominatim(location, timeout, session)
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(PROVIDER, f"Unexpected Nominatim payload: {e}") from e

    if coordinates is None:
        raise ProviderError(PROVIDER, f"Location not found: {location}")

    try:
        validate_coordinates(coordinates.lat, coordinates.lon)
    except ValueError as e:
        raise ProviderError(PROVIDER, str(e)) from e

    logger.info(f"Geocoded '{location}' -> ({coordinates.lat:.4f}, {coordinates.lon:.4f})")
    return coordinates
