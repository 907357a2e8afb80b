"""
Restoration Zone Scoring
========================
Site-level indices for the restoration map:

1. Drought index (0-100, higher = drier) from weather, soil and vegetation
2. Health score (0-100) from the drought index and forest cover
3. Eight restoration zones ringed around the site, each with a priority
   band and a planting list drawn from the site's succession species
4. A rough carbon stock estimate from forest cover

All functions are pure except generate_restoration_zones, which draws zone
offsets from the supplied random generator.
"""

import logging
import math
import random
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, Any, List, Optional, Sequence

from simulation.rounding import round_half_away, round_to

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Drought index components
OPTIMAL_RAINFALL_MM = 100
OPTIMAL_TEMP_C = 25
TEMP_STRESS_PER_DEGREE = 3
OPTIMAL_HUMIDITY = 70
CLAY_RETENTION_FACTOR = 1.5

DROUGHT_WEIGHTS = {
    "precipitation": 0.30,
    "temperature": 0.20,
    "humidity": 0.20,
    "soil": 0.15,
    "vegetation": 0.15,
}

# Health score
HEALTH_DROUGHT_WEIGHT = 0.6
HEALTH_COVER_WEIGHT = 0.4

# Tree cover -> NDVI proxy: 0% cover = 0.1, 100% cover = 0.8
NDVI_BASE = 0.1
NDVI_COVER_SCALE = 0.7

# Zones
ZONE_COUNT = 8
ZONE_RADIUS_DEG = 0.05        # ~5 km
ZONE_HEALTH_SPREAD = 20       # zone health varies +/- this around the site score
HIGH_PRIORITY_BELOW = 40
MEDIUM_PRIORITY_BELOW = 70

# Carbon (tonnes C per hectare of forest, per 1 km2 assessed)
TROPICS_LATITUDE = 23.5
TROPICAL_BIOMASS_T_PER_HA = 200
TEMPERATE_BIOMASS_T_PER_HA = 100
ASSESSED_AREA_HA = 100
SEQUESTRATION_T_PER_HA_YEAR = 3.5

# Succession grouping
SUCCESSION_GROUP_SIZE = 5
TROPICAL_SPECIES_LATITUDE = 35

REGIONAL_SPECIES = {
    "tropical": {
        "pioneers": ["Leucaena leucocephala", "Gliricidia sepium", "Acacia auriculiformis",
                     "Casuarina equisetifolia", "Albizia lebbeck"],
        "secondary": ["Swietenia mahagoni", "Tectona grandis", "Azadirachta indica",
                      "Dalbergia sissoo", "Terminalia arjuna"],
        "climax": ["Dipterocarpus alatus", "Shorea robusta", "Ficus religiosa",
                   "Mangifera indica", "Artocarpus heterophyllus"],
    },
    "temperate": {
        "pioneers": ["Betula pendula", "Populus tremula", "Alnus glutinosa",
                     "Salix alba", "Pinus sylvestris"],
        "secondary": ["Quercus robur", "Acer pseudoplatanus", "Fraxinus excelsior",
                      "Carpinus betulus", "Tilia cordata"],
        "climax": ["Fagus sylvatica", "Abies alba", "Picea abies",
                   "Taxus baccata", "Ilex aquifolium"],
    },
}


# =============================================================================
# DATA CLASSES
# =============================================================================

class ZonePriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class SuccessionSpecies:
    """Planting candidates by successional stage."""
    pioneers: List[str] = field(default_factory=list)
    secondary: List[str] = field(default_factory=list)
    climax: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CarbonEstimate:
    current_stock: int            # tonnes C
    annual_sequestration: float   # tonnes C / year

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RestorationZone:
    lat: float
    lon: float
    health_score: int
    priority: ZonePriority
    recommended_species: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "health_score": self.health_score,
            "priority": self.priority.value,
            "recommended_species": list(self.recommended_species),
        }


# =============================================================================
# INDICES
# =============================================================================

def compute_drought_index(weather, soil, ndvi: float) -> int:
    """
    Weighted drought index, clamped to [0, 100].

    Args:
        weather: Anything with temp (C), humidity (%) and rainfall (mm)
        soil: Anything with clay (%)
        ndvi: Vegetation index in [-1, 1]
    """
    precip_deficit = max(0, 100 - weather.rainfall / OPTIMAL_RAINFALL_MM * 100)
    temp_stress = abs(weather.temp - OPTIMAL_TEMP_C) * TEMP_STRESS_PER_DEGREE
    humidity_deficit = max(0, 100 - weather.humidity / OPTIMAL_HUMIDITY * 100)
    # More clay holds more water
    soil_capacity = 100 - soil.clay * CLAY_RETENTION_FACTOR
    vegetation_stress = (1 - ndvi) * 100

    index = (
        precip_deficit * DROUGHT_WEIGHTS["precipitation"]
        + temp_stress * DROUGHT_WEIGHTS["temperature"]
        + humidity_deficit * DROUGHT_WEIGHTS["humidity"]
        + soil_capacity * DROUGHT_WEIGHTS["soil"]
        + vegetation_stress * DROUGHT_WEIGHTS["vegetation"]
    )
    return round_half_away(min(100, max(0, index)))


def health_score(drought_index: float, forest_cover: float) -> int:
    return round_half_away(
        (100 - drought_index) * HEALTH_DROUGHT_WEIGHT + forest_cover * HEALTH_COVER_WEIGHT
    )


def ndvi_from_forest_cover(forest_cover: float) -> float:
    return round_to(forest_cover / 100 * NDVI_COVER_SCALE + NDVI_BASE, 2)


def estimate_carbon(lat: float, forest_cover: float) -> CarbonEstimate:
    """Carbon stock and yearly uptake for 1 km2 around the site."""
    biomass = TROPICAL_BIOMASS_T_PER_HA if abs(lat) < TROPICS_LATITUDE else TEMPERATE_BIOMASS_T_PER_HA
    forested_ha = forest_cover / 100 * ASSESSED_AREA_HA
    return CarbonEstimate(
        current_stock=round_half_away(forested_ha * biomass),
        annual_sequestration=round_to(forested_ha * SEQUESTRATION_T_PER_HA_YEAR, 1),
    )


# =============================================================================
# SPECIES
# =============================================================================

def group_by_succession(names: Sequence[str]) -> SuccessionSpecies:
    """First 15 distinct names split into pioneer / secondary / climax groups of 5."""
    unique = list(dict.fromkeys(name for name in names if name))
    size = SUCCESSION_GROUP_SIZE
    return SuccessionSpecies(
        pioneers=unique[:size],
        secondary=unique[size:2 * size],
        climax=unique[2 * size:3 * size],
    )


def regional_species(lat: float) -> SuccessionSpecies:
    region = "tropical" if abs(lat) < TROPICAL_SPECIES_LATITUDE else "temperate"
    groups = REGIONAL_SPECIES[region]
    return SuccessionSpecies(
        pioneers=list(groups["pioneers"]),
        secondary=list(groups["secondary"]),
        climax=list(groups["climax"]),
    )


# =============================================================================
# ZONES
# =============================================================================

def zone_priority(zone_health: float) -> ZonePriority:
    if zone_health < HIGH_PRIORITY_BELOW:
        return ZonePriority.HIGH
    if zone_health < MEDIUM_PRIORITY_BELOW:
        return ZonePriority.MEDIUM
    return ZonePriority.LOW


def zone_species(priority: ZonePriority, species: SuccessionSpecies) -> List[str]:
    """Degraded zones get pioneers, healthy ones secondary species."""
    if priority is ZonePriority.HIGH:
        return species.pioneers[:3]
    if priority is ZonePriority.MEDIUM:
        return species.pioneers[:2] + species.secondary[:2]
    return species.secondary[:3]


def generate_restoration_zones(
    lat: float,
    lon: float,
    site_health: float,
    species: SuccessionSpecies,
    rng: Optional[random.Random] = None,
) -> List[RestorationZone]:
    """
    Place ZONE_COUNT zones evenly by bearing around (lat, lon).

    Each zone sits 0.5-1.0 x ZONE_RADIUS_DEG from the site and its health is
    the site health jittered by up to +/- ZONE_HEALTH_SPREAD, clamped to
    [0, 100]. Pass a seeded ``rng`` for reproducible zones.
    """
    rng = rng or random.Random()
    zones = []

    for i in range(ZONE_COUNT):
        angle = i / ZONE_COUNT * 2 * math.pi
        distance = ZONE_RADIUS_DEG * (0.5 + rng.random() * 0.5)

        zone_health = site_health + (rng.random() * 2 * ZONE_HEALTH_SPREAD - ZONE_HEALTH_SPREAD)
        zone_health = max(0, min(100, zone_health))
        priority = zone_priority(zone_health)

        zones.append(RestorationZone(
            lat=round_to(lat + distance * math.cos(angle), 4),
            lon=round_to(lon + distance * math.sin(angle), 4),
            health_score=round_half_away(zone_health),
            priority=priority,
            recommended_species=zone_species(priority, species),
        ))

    logger.debug(f"Generated {len(zones)} zones around ({lat:.4f}, {lon:.4f}), site health {site_health}")
    return zones
