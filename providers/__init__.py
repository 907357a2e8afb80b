"""
Habitat Environmental Data Providers
====================================
Clients for the third-party services behind the dashboard's data panels.

Modules:
    weather: OpenWeatherMap current conditions
    soil: ISRIC SoilGrids topsoil properties
    species: GBIF species occurrences
    forest: Global Forest Watch cover, loss and alerts
    ndvi: Sentinel Hub vegetation indices
    geocoding: Place name -> coordinates (Mapbox, Nominatim)
    report: Concurrent full-report aggregation
"""

from .errors import ProviderError, ProviderConfigError
from .client import validate_coordinates
from .weather import WeatherData, fetch_weather_data
from .soil import SoilData, fetch_soil_data
from .species import SpeciesData, SpeciesObservation, fetch_species_data
from .forest import ForestData, fetch_forest_data
from .ndvi import NDVIData, fetch_ndvi_data
from .geocoding import Coordinates, geocode_location
from .report import ReportError, build_full_report, fetch_all, provider_fetchers
