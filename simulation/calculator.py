"""
Calamity Impact Calculator
==========================
Closed-form estimates of how a calamity affects planted species and the
site's environmental metrics.

Per species:
    mortality = sensitivity * severity * area * (1 + duration_factor * 0.5)
    survival  = max(5, round((1 - mortality) * 100))
    growth    = round(min(95, mortality * 120))
    recovery  = round(duration / recovery_rate * (1 + severity))

Aggregate metric deltas (percentage points, signed, unclamped):
    ndvi, moisture, soil health, carbon capture

All rounding is half away from zero (see simulation.rounding).

DISCLAIMER: These are heuristic planning estimates, not ecological
forecasts. Deltas can exceed physical bounds at extreme inputs.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Sequence

from .rounding import round_half_away
from .species_table import SpeciesProfile

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

class CalamityType(str, Enum):
    """Calamity kinds understood by the simulator."""
    DROUGHT = "drought"
    FLOOD = "flood"
    HEAT_WAVE = "heat_wave"
    FROST = "frost"
    PEST_OUTBREAK = "pest_outbreak"
    MINERAL_DEPLETION = "mineral_depletion"


# Which profile coefficient drives mortality for each calamity
SENSITIVITY_FIELD = {
    CalamityType.DROUGHT.value: "drought_sensitivity",
    CalamityType.FLOOD.value: "flood_sensitivity",
    CalamityType.HEAT_WAVE.value: "heat_sensitivity",
    CalamityType.FROST.value: "frost_sensitivity",
    CalamityType.PEST_OUTBREAK.value: "pest_sensitivity",
    CalamityType.MINERAL_DEPLETION.value: "mineral_dependency",
}

UNKNOWN_TYPE_SENSITIVITY = 0.4

MIN_SURVIVAL_RATE = 5        # residual survivors, never a total wipe-out
MAX_GROWTH_IMPACT = 95
GROWTH_IMPACT_SCALE = 120
DURATION_SATURATION_MONTHS = 12
DURATION_WEIGHT = 0.5

# Aggregate metric scales
NDVI_SCALE = 40
DROUGHT_MOISTURE_SCALE = 50
FLOOD_MOISTURE_SCALE = 30
DEFAULT_MOISTURE_SCALE = 20
MINERAL_SOIL_SCALE = 60
DEFAULT_SOIL_SCALE = 20
CARBON_SCALE = 0.8

# Fixed presentation values for the species card in simulation results
SPECIES_CARD_DEFAULTS = {
    "type": "Native",
    "suitability": 75,
    "waterRequirement": "Medium",
    "carbonCapture": 35,
    "description": "",
}


def _plain_number(value: float):
    """80.0 -> 80; anything else unchanged."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class CalamityScenario:
    """A calamity event driving the simulation."""
    type: str
    severity: float          # 0-100
    affected_area: float     # 0-100 percent of the site
    duration: float          # months

    @property
    def severity_factor(self) -> float:
        return self.severity / 100

    @property
    def area_factor(self) -> float:
        return self.affected_area / 100

    @property
    def duration_factor(self) -> float:
        return min(1, self.duration / DURATION_SATURATION_MONTHS)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalamityScenario":
        return cls(
            type=data["type"],
            severity=data["severity"],
            affected_area=data["affectedArea"],
            duration=data["duration"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": _plain_number(self.severity),
            "affectedArea": _plain_number(self.affected_area),
            "duration": _plain_number(self.duration),
        }


@dataclass(frozen=True)
class SpeciesImpact:
    """Impact of a scenario on one species."""
    profile: SpeciesProfile
    survival_rate: int
    growth_impact: int
    recovery_time: int

    @property
    def name(self) -> str:
        return self.profile.name

    def species_card(self) -> Dict[str, Any]:
        card = {"name": self.profile.name}
        card.update(SPECIES_CARD_DEFAULTS)
        card["droughtTolerance"] = round_half_away((1 - self.profile.drought_sensitivity) * 100)
        card["mineralSensitivity"] = round_half_away(self.profile.mineral_dependency * 100)
        return card

    def to_dict(self) -> Dict[str, Any]:
        return {
            "species": self.species_card(),
            "survivalRate": self.survival_rate,
            "growthImpact": self.growth_impact,
            "recoveryTime": self.recovery_time,
        }


@dataclass(frozen=True)
class MetricsImpact:
    """Signed percentage-point deltas for the site metrics."""
    ndvi: int
    moisture: int
    soil_health: int
    carbon_capture: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ndvi": self.ndvi,
            "moisture": self.moisture,
            "soilHealth": self.soil_health,
            "carbonCapture": self.carbon_capture,
        }


# =============================================================================
# CALCULATION FUNCTIONS
# =============================================================================

def select_base_sensitivity(calamity_type: str, profile: SpeciesProfile) -> float:
    """Pick the profile coefficient matching the calamity (0.4 if unrecognised)."""
    field_name = SENSITIVITY_FIELD.get(calamity_type)
    if field_name is None:
        logger.warning(f"Unrecognised calamity type '{calamity_type}', using {UNKNOWN_TYPE_SENSITIVITY}")
        return UNKNOWN_TYPE_SENSITIVITY
    return getattr(profile, field_name)


def calculate_mortality_rate(scenario: CalamityScenario, profile: SpeciesProfile) -> float:
    """Fraction of the population lost; not clamped, may exceed 1."""
    base_sensitivity = select_base_sensitivity(scenario.type, profile)
    return (
        base_sensitivity
        * scenario.severity_factor
        * scenario.area_factor
        * (1 + scenario.duration_factor * DURATION_WEIGHT)
    )


def calculate_species_impact(scenario: CalamityScenario, profile: SpeciesProfile) -> SpeciesImpact:
    """
    Survival, growth impact and recovery time for one species.

    Args:
        scenario: The calamity being simulated
        profile: Sensitivity coefficients for the species

    Returns:
        SpeciesImpact with survival in [5, 100] and growth impact in [0, 95]
        for in-range scenarios
    """
    mortality_rate = calculate_mortality_rate(scenario, profile)

    survival_rate = max(MIN_SURVIVAL_RATE, round_half_away((1 - mortality_rate) * 100))
    growth_impact = round_half_away(min(MAX_GROWTH_IMPACT, mortality_rate * GROWTH_IMPACT_SCALE))
    recovery_time = round_half_away(
        scenario.duration * (1 / profile.recovery_rate) * (1 + scenario.severity_factor)
    )

    return SpeciesImpact(
        profile=profile,
        survival_rate=survival_rate,
        growth_impact=growth_impact,
        recovery_time=recovery_time,
    )


def average_survival(species_impact: Sequence[SpeciesImpact]) -> float:
    """Mean survival rate; an empty list averages to 0."""
    total = sum(impact.survival_rate for impact in species_impact)
    return total / max(1, len(species_impact))


def calculate_metrics_impact(
    scenario: CalamityScenario,
    species_impact: Sequence[SpeciesImpact]
) -> MetricsImpact:
    """Aggregate environmental metric deltas for the whole site."""
    severity_factor = scenario.severity_factor
    area_factor = scenario.area_factor
    avg_survival = average_survival(species_impact)

    if scenario.type == CalamityType.DROUGHT.value:
        moisture = -round_half_away(severity_factor * DROUGHT_MOISTURE_SCALE)
    elif scenario.type == CalamityType.FLOOD.value:
        moisture = round_half_away(severity_factor * FLOOD_MOISTURE_SCALE)
    else:
        moisture = -round_half_away(severity_factor * DEFAULT_MOISTURE_SCALE)

    if scenario.type == CalamityType.MINERAL_DEPLETION.value:
        soil_health = -round_half_away(severity_factor * MINERAL_SOIL_SCALE)
    else:
        soil_health = -round_half_away(severity_factor * DEFAULT_SOIL_SCALE)

    return MetricsImpact(
        ndvi=-round_half_away(severity_factor * area_factor * NDVI_SCALE),
        moisture=moisture,
        soil_health=soil_health,
        carbon_capture=-round_half_away((100 - avg_survival) * CARBON_SCALE),
    )
