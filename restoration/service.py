"""
Restoration data for one site: fetch weather, soil, forest cover and local
species concurrently, then score the site and lay out restoration zones.

Weather, soil and forest cover are required. Species fall back to a regional
list when GBIF has nothing usable.
"""

import logging
import math
import random
from dataclasses import dataclass
from functools import partial
from typing import Dict, Any, Callable, List, Optional, Tuple

import requests

from providers.errors import ProviderError
from providers.forest import ForestData, fetch_forest_data
from providers.geocoding import Coordinates
from providers.report import DEFAULT_BUDGET_SECONDS, fetch_all
from providers.soil import SoilData, fetch_soil_data
from providers.species import DEFAULT_RADIUS_KM, fetch_species_data
from providers.weather import WeatherData, fetch_weather_data

from .scoring import (
    CarbonEstimate,
    RestorationZone,
    SuccessionSpecies,
    compute_drought_index,
    estimate_carbon,
    generate_restoration_zones,
    group_by_succession,
    health_score,
    ndvi_from_forest_cover,
    regional_species,
)

logger = logging.getLogger(__name__)

MISSING_LOCATION = 'Either "location" or both "lat" and "lon" must be provided'
COORDINATE_RANGE = "lat must be between -90 and 90, lon must be between -180 and 180"


class RestorationInputError(ValueError):
    """Bad location/coordinate input; ``error`` is the short client-facing label."""

    def __init__(self, error: str, message: str):
        super().__init__(message)
        self.error = error
        self.message = message


@dataclass
class RestorationData:
    coordinates: Coordinates
    weather: WeatherData
    soil: SoilData
    ndvi: float
    forest_cover: float
    carbon: CarbonEstimate
    species: SuccessionSpecies
    drought_index: int
    health_score: int
    restoration_zones: List[RestorationZone]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coordinates": self.coordinates.to_dict(),
            "weather": self.weather.to_dict(),
            "soil": self.soil.to_dict(),
            "ndvi": self.ndvi,
            "forest_cover": self.forest_cover,
            "carbon": self.carbon.to_dict(),
            "species": self.species.to_dict(),
            "drought_index": self.drought_index,
            "health_score": self.health_score,
            "restoration_zones": [zone.to_dict() for zone in self.restoration_zones],
        }


def check_coordinates(lat: Any, lon: Any) -> Tuple[float, float]:
    """
    Raises:
        RestorationInputError: If lat/lon are not finite numbers or out of range
    """
    for value in (lat, lon):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise RestorationInputError("Invalid coordinates", "lat and lon must be numbers")
    if not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
        raise RestorationInputError("Invalid coordinate range", COORDINATE_RANGE)
    return float(lat), float(lon)


def fetch_succession_species(
    lat: float,
    lon: float,
    radius_km: float = DEFAULT_RADIUS_KM,
    timeout: float = 30,
    session: Optional[requests.Session] = None,
) -> SuccessionSpecies:
    """Observed plant species grouped by succession stage, or the regional list."""
    try:
        observed = fetch_species_data(lat, lon, radius_km, timeout=timeout, session=session)
    except ProviderError as e:
        logger.warning(f"Using regional species list: {e}")
        return regional_species(lat)

    if not observed.plant_species:
        logger.warning("No plant species observed nearby, using regional species list")
        return regional_species(lat)
    return group_by_succession(observed.plant_species)


def restoration_fetchers(lat: float, lon: float, settings) -> Dict[str, Callable[[], Any]]:
    """Zero-argument fetchers for build_restoration_data (see backend.config.Settings)."""
    timeout = settings.provider_timeout
    return {
        "weather": partial(fetch_weather_data, lat, lon, settings.openweather_api_key, timeout=timeout),
        "soil": partial(fetch_soil_data, lat, lon, timeout=timeout),
        "forest": partial(fetch_forest_data, lat, lon, settings.gfw_api_key, timeout=timeout),
        "species": partial(fetch_succession_species, lat, lon, timeout=timeout),
    }


def build_restoration_data(
    lat: float,
    lon: float,
    fetchers: Dict[str, Callable[[], Any]],
    budget: float = DEFAULT_BUDGET_SECONDS,
    rng: Optional[random.Random] = None,
) -> RestorationData:
    """
    Score the site at (lat, lon) and generate its restoration zones.

    Args:
        fetchers: weather, soil, forest and species callables (see restoration_fetchers)
        budget: Wall-clock seconds allowed for the fetches
        rng: Random generator for zone placement

    Raises:
        ReportError: If a required fetch fails or the budget is exceeded
    """
    logger.info(f"[Restoration] Fetching data for coordinates: {lat}, {lon}")
    results = fetch_all(fetchers, budget)

    weather: WeatherData = results["weather"]
    soil: SoilData = results["soil"]
    forest: ForestData = results["forest"]
    species: SuccessionSpecies = results["species"]

    ndvi = ndvi_from_forest_cover(forest.forest_cover)
    drought_index = compute_drought_index(weather, soil, ndvi)
    site_health = health_score(drought_index, forest.forest_cover)
    zones = generate_restoration_zones(lat, lon, site_health, species, rng=rng)

    logger.info(f"[Restoration] Drought index {drought_index}, health score {site_health}")
    return RestorationData(
        coordinates=Coordinates(lat=lat, lon=lon),
        weather=weather,
        soil=soil,
        ndvi=ndvi,
        forest_cover=forest.forest_cover,
        carbon=estimate_carbon(lat, forest.forest_cover),
        species=species,
        drought_index=drought_index,
        health_score=site_health,
        restoration_zones=zones,
    )
