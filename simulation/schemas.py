"""
Request models for the simulation endpoint.

JSON keys are camelCase (the dashboard's convention); attributes are
snake_case through pydantic aliases.
"""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from .calculator import CalamityScenario

CalamityTypeName = Literal[
    "drought",
    "flood",
    "heat_wave",
    "frost",
    "pest_outbreak",
    "mineral_depletion",
]

# 100 years
MAX_DURATION_MONTHS = 1200


class ScenarioModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    type: CalamityTypeName
    severity: float = Field(ge=0, le=100)
    affected_area: float = Field(alias="affectedArea", ge=0, le=100)
    duration: float = Field(ge=0, le=MAX_DURATION_MONTHS)  # months

    def to_scenario(self) -> CalamityScenario:
        return CalamityScenario(
            type=self.type,
            severity=self.severity,
            affected_area=self.affected_area,
            duration=self.duration,
        )


class SimulationRequest(BaseModel):
    """Body of POST /api/simulation/run."""
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    scenario: ScenarioModel
    selected_species: List[str] = Field(alias="selectedSpecies")
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
