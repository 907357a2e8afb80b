"""
Soil provider: ISRIC SoilGrids v2.0 point query (topsoil, 0-5cm mean).
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

import requests

from simulation.rounding import round_to

from .client import get_json
from .errors import ProviderError

logger = logging.getLogger(__name__)

PROVIDER = "soil"
SOILGRIDS_URL = "https://rest.isric.org/soilgrids/v2.0/properties/query"
SOIL_DEPTH = "0-5cm"

# SoilGrids property -> (output field, divisor to reach the output unit)
SOIL_PROPERTIES = {
    "clay": ("clay", 10),              # g/kg -> %
    "sand": ("sand", 10),
    "silt": ("silt", 10),
    "phh2o": ("pH", 10),               # pH*10 -> pH
    "nitrogen": ("nitrogen", 100),     # cg/kg -> g/kg
    "soc": ("organic_carbon", 10),     # dg/kg -> g/kg
    "cec": ("cec", 10),                # mmol(c)/kg
    "bdod": ("bulk_density", 100),     # cg/cm3 -> g/cm3
}


@dataclass
class SoilData:
    clay: float
    sand: float
    silt: float
    pH: float
    nitrogen: float
    organic_carbon: float
    cec: float
    bulk_density: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _layer_mean(layers, name: str) -> float:
    for layer in layers:
        if layer.get("name") != name:
            continue
        depths = layer.get("depths") or []
        if depths and depths[0].get("values") and depths[0]["values"].get("mean") is not None:
            return depths[0]["values"]["mean"]
        break
    raise ProviderError(PROVIDER, f"Missing data for property: {name}")


def parse_soil(data: Dict[str, Any]) -> SoilData:
    """Convert a SoilGrids response to SoilData in conventional units."""
    try:
        layers = (data.get("properties") or {}).get("layers")
        if not layers:
            raise ProviderError(PROVIDER, "Invalid response from SoilGrids API")

        values = {}
        for prop, (field_name, divisor) in SOIL_PROPERTIES.items():
            values[field_name] = round_to(_layer_mean(layers, prop) / divisor, 1)
    except (AttributeError, TypeError) as e:
        raise ProviderError(PROVIDER, f"Unexpected SoilGrids payload: {e}") from e
    return SoilData(**values)


def fetch_soil_data(
    lat: float,
    lon: float,
    timeout: float = 30,
    session: Optional[requests.Session] = None,
) -> SoilData:
    """Fetch topsoil properties at (lat, lon). No API key required."""
    params = [("lon", lon), ("lat", lat)]
    params += [("property", prop) for prop in SOIL_PROPERTIES]
    params += [("depth", SOIL_DEPTH), ("value", "mean")]

    data = get_json(PROVIDER, "SoilGrids API", SOILGRIDS_URL, params=params,
                    timeout=timeout, session=session)

    soil = parse_soil(data)
    logger.info(f"Soil at ({lat:.3f}, {lon:.3f}): pH {soil.pH}, clay {soil.clay}%")
    return soil
