import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from backend.config import Settings  # noqa: E402
from simulation import CalamityScenario  # noqa: E402


@pytest.fixture
def settings():
    return Settings(
        openweather_api_key="ow-key",
        gfw_api_key="gfw-key",
        sentinelhub_client_id="sh-id",
        sentinelhub_client_secret="sh-secret",
        google_api_key=None,
    )


@pytest.fixture
def drought_scenario():
    return CalamityScenario(type="drought", severity=80, affected_area=60, duration=6)


@pytest.fixture
def simulation_body():
    return {
        "scenario": {"type": "drought", "severity": 80, "affectedArea": 60, "duration": 6},
        "selectedSpecies": ["Neem"],
        "lat": 19.076,
        "lng": 72.878,
    }
