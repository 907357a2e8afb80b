"""
Simulation Engine
=================
Orchestrates the impact calculator, the metrics calculator and the
recommendation generator, and chooses where the work happens.

Two strategies are available, selected once from configuration:

- LocalSimulation: evaluate the formulas in-process
- RemoteSimulation: forward the request body to another backend's
  /api/simulation/run and relay its JSON verbatim

Neither strategy retries. A remote transport failure or non-2xx response
raises RemoteSimulationError.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Sequence

import requests

from .calculator import (
    CalamityScenario,
    MetricsImpact,
    SpeciesImpact,
    calculate_metrics_impact,
    calculate_species_impact,
)
from .recommendations import generate_recommendations
from .species_table import lookup_or_default

logger = logging.getLogger(__name__)

SIMULATION_PATH = "/api/simulation/run"


class SimulationError(Exception):
    """Base error for the simulation engine."""


class RemoteSimulationError(SimulationError):
    """The delegated backend failed or answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class SimulationResult:
    """Complete simulation output."""
    scenario: CalamityScenario
    species_impact: List[SpeciesImpact]
    metrics_impact: MetricsImpact
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario": self.scenario.to_dict(),
            "speciesImpact": [impact.to_dict() for impact in self.species_impact],
            "metricsImpact": self.metrics_impact.to_dict(),
            "recommendations": list(self.recommendations),
        }


def run_simulation(scenario: CalamityScenario, selected_species: Sequence[str]) -> SimulationResult:
    """
    Simulate a calamity against a list of species.

    Args:
        scenario: The calamity to apply
        selected_species: Species names; order is preserved in the result and
            unknown names use the default sensitivity profile

    Returns:
        SimulationResult
    """
    species_impact = [
        calculate_species_impact(scenario, lookup_or_default(name))
        for name in selected_species
    ]
    metrics_impact = calculate_metrics_impact(scenario, species_impact)
    recommendations = generate_recommendations(scenario, species_impact)

    return SimulationResult(
        scenario=scenario,
        species_impact=species_impact,
        metrics_impact=metrics_impact,
        recommendations=recommendations,
    )


class SimulationStrategy:
    """Where a validated simulation request gets evaluated."""

    name = "base"

    def run(self, scenario: CalamityScenario, selected_species: Sequence[str],
            payload: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError


class LocalSimulation(SimulationStrategy):
    """Evaluate the formulas in this process."""

    name = "local"

    def run(self, scenario, selected_species, payload):
        result = run_simulation(scenario, selected_species)
        logger.info(
            f"Simulated {scenario.type} (severity {scenario.severity}) "
            f"for {len(result.species_impact)} species"
        )
        return result.to_dict()


class RemoteSimulation(SimulationStrategy):
    """Delegate to another backend exposing the same endpoint."""

    name = "remote"

    def __init__(self, base_url: str, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{SIMULATION_PATH}"

    def run(self, scenario, selected_species, payload):
        logger.info(f"Delegating simulation to {self.url}")
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise RemoteSimulationError(f"Backend unreachable: {e}") from e

        if not response.ok:
            raise RemoteSimulationError(
                f"Backend error: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise RemoteSimulationError(f"Backend returned invalid JSON: {e}") from e


def select_strategy(backend_url: Optional[str], timeout: float = 30.0) -> SimulationStrategy:
    """Remote when a backend URL is configured, local otherwise."""
    if backend_url:
        return RemoteSimulation(backend_url, timeout=timeout)
    return LocalSimulation()
