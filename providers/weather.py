"""
Weather provider: OpenWeatherMap current conditions.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

import requests

from simulation.rounding import round_to

from .client import get_json
from .errors import ProviderConfigError, ProviderError

logger = logging.getLogger(__name__)

PROVIDER = "weather"
OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


@dataclass
class WeatherData:
    temp: float          # degrees C
    humidity: float      # percent
    rainfall: float      # mm over the last 1h (or 3h)
    wind: float          # m/s
    conditions: str
    pressure: float      # hPa
    visibility: float    # km

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_weather(data: Dict[str, Any]) -> WeatherData:
    """Normalise an OpenWeatherMap /weather payload."""
    try:
        main = data["main"]
        rain = data.get("rain") or {}
        weather = data.get("weather") or [{}]
        return WeatherData(
            temp=round_to(main["temp"], 1),
            humidity=main["humidity"],
            rainfall=rain.get("1h") or rain.get("3h") or 0,
            wind=round_to(data["wind"]["speed"], 1),
            conditions=weather[0].get("description") or "unknown",
            pressure=main["pressure"],
            visibility=data.get("visibility", 0) / 1000,
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ProviderError(PROVIDER, f"Unexpected OpenWeather payload, missing {e}") from e


def fetch_weather_data(
    lat: float,
    lon: float,
    api_key: Optional[str],
    timeout: float = 15,
    session: Optional[requests.Session] = None,
) -> WeatherData:
    """
    Fetch current weather at (lat, lon).

    Raises:
        ProviderConfigError: If no OpenWeatherMap key is configured
        ProviderError: On transport, HTTP or payload errors
    """
    if not api_key:
        raise ProviderConfigError(
            PROVIDER, "OPENWEATHER_API_KEY is not configured. Please add it to .env file."
        )

    params = {"lat": lat, "lon": lon, "appid": api_key, "units": "metric"}
    data = get_json(PROVIDER, "OpenWeather API", OPENWEATHER_URL, params=params,
                    timeout=timeout, session=session)

    weather = parse_weather(data)
    logger.info(f"Weather at ({lat:.3f}, {lon:.3f}): {weather.temp}C, {weather.conditions}")
    return weather
