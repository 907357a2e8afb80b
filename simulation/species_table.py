"""
Species Sensitivity Table
=========================
Static per-species vulnerability coefficients used by the calamity simulator.

Each profile carries six hazard coefficients in [0, 1] (higher = more
vulnerable) and a recovery rate in (0, 1] (higher = faster regrowth).
The table is built once at import time and never mutated.

Unknown species are not an error: they resolve to DEFAULT_PROFILE through
lookup_or_default(), which keeps the simulator total over any species list
the dashboard sends.
"""

import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Dict, Any, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeciesProfile:
    """Calamity sensitivities for one species."""
    name: str
    drought_sensitivity: float
    flood_sensitivity: float
    heat_sensitivity: float
    frost_sensitivity: float
    pest_sensitivity: float
    mineral_dependency: float
    recovery_rate: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "droughtSensitivity": self.drought_sensitivity,
            "floodSensitivity": self.flood_sensitivity,
            "heatSensitivity": self.heat_sensitivity,
            "frostSensitivity": self.frost_sensitivity,
            "pestSensitivity": self.pest_sensitivity,
            "mineralDependency": self.mineral_dependency,
            "recoveryRate": self.recovery_rate,
        }


# Coefficients used when a species is not in the table
DEFAULT_PROFILE = SpeciesProfile(
    name="default",
    drought_sensitivity=0.4,
    flood_sensitivity=0.4,
    heat_sensitivity=0.3,
    frost_sensitivity=0.5,
    pest_sensitivity=0.3,
    mineral_dependency=0.4,
    recovery_rate=0.6,
)


def _profile(name, drought, flood, heat, frost, pest, mineral, recovery):
    return SpeciesProfile(
        name=name,
        drought_sensitivity=drought,
        flood_sensitivity=flood,
        heat_sensitivity=heat,
        frost_sensitivity=frost,
        pest_sensitivity=pest,
        mineral_dependency=mineral,
        recovery_rate=recovery,
    )


# name: drought, flood, heat, frost, pest, mineral, recovery
_SPECIES_ROWS = [
    ("Neem", 0.1, 0.4, 0.15, 0.7, 0.1, 0.2, 0.8),
    ("Banyan", 0.35, 0.3, 0.25, 0.6, 0.2, 0.35, 0.6),
    ("Teak", 0.6, 0.5, 0.4, 0.5, 0.3, 0.5, 0.5),
    ("Mango", 0.45, 0.4, 0.3, 0.7, 0.4, 0.4, 0.55),
    ("Bamboo", 0.5, 0.2, 0.35, 0.8, 0.15, 0.3, 0.9),
    ("Jamun", 0.2, 0.35, 0.2, 0.65, 0.25, 0.3, 0.7),
    ("Eucalyptus", 0.3, 0.6, 0.25, 0.4, 0.35, 0.45, 0.75),
    ("Indian Rosewood", 0.25, 0.45, 0.2, 0.55, 0.3, 0.35, 0.65),
    ("Sal", 0.5, 0.35, 0.35, 0.45, 0.25, 0.4, 0.5),
]

SPECIES_TABLE: Mapping[str, SpeciesProfile] = MappingProxyType(
    {row[0]: _profile(*row) for row in _SPECIES_ROWS}
)


def lookup_or_default(name: str) -> SpeciesProfile:
    """
    Return the profile for ``name``, or the default coefficients renamed to it.

    Lookup is exact and case-sensitive, matching the names the dashboard
    shows in its species picker.
    """
    profile = SPECIES_TABLE.get(name)
    if profile is not None:
        return profile

    logger.debug(f"No sensitivity profile for '{name}', using defaults")
    return replace(DEFAULT_PROFILE, name=name)


def known_species() -> list:
    """Species names with an explicit profile, in table order."""
    return list(SPECIES_TABLE.keys())


def species_table_dict() -> Dict[str, Dict[str, Any]]:
    """The whole table as plain dicts (for the API listing)."""
    return {name: profile.to_dict() for name, profile in SPECIES_TABLE.items()}
