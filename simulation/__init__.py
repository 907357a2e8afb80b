"""
Habitat Calamity Simulator
==========================
Estimates how a calamity (drought, flood, heat wave, frost, pest outbreak,
mineral depletion) affects a set of planted species and the site's
environmental metrics.

Modules:
    species_table: Static per-species sensitivity coefficients
    calculator: Per-species impact and aggregate metric formulas
    recommendations: Ordered mitigation advice
    schemas: Request validation models
    engine: Orchestration and local/remote strategies

Example:
    >>> from simulation import CalamityScenario, run_simulation
    >>> scenario = CalamityScenario("drought", severity=80, affected_area=60, duration=6)
    >>> run_simulation(scenario, ["Neem"]).species_impact[0].survival_rate
    94
"""

from .rounding import round_half_away, round_to
from .species_table import (
    SpeciesProfile,
    DEFAULT_PROFILE,
    SPECIES_TABLE,
    lookup_or_default,
    known_species,
    species_table_dict,
)
from .calculator import (
    CalamityType,
    CalamityScenario,
    SpeciesImpact,
    MetricsImpact,
    select_base_sensitivity,
    calculate_mortality_rate,
    calculate_species_impact,
    calculate_metrics_impact,
)
from .recommendations import generate_recommendations
from .schemas import ScenarioModel, SimulationRequest
from .engine import (
    SimulationError,
    RemoteSimulationError,
    SimulationResult,
    SimulationStrategy,
    LocalSimulation,
    RemoteSimulation,
    run_simulation,
    select_strategy,
)

__version__ = "1.0.0"
