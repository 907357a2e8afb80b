from unittest.mock import Mock

import pytest
import requests

from simulation import (
    CalamityScenario,
    LocalSimulation,
    RemoteSimulation,
    RemoteSimulationError,
    run_simulation,
    select_strategy,
)


def _response(ok=True, status_code=200, reason="OK", payload=None):
    response = Mock()
    response.ok = ok
    response.status_code = status_code
    response.reason = reason
    response.json.return_value = payload
    return response


def test_run_simulation_golden(drought_scenario):
    result = run_simulation(drought_scenario, ["Neem"]).to_dict()

    assert result["scenario"] == {"type": "drought", "severity": 80, "affectedArea": 60, "duration": 6}
    assert result["speciesImpact"][0]["survivalRate"] == 94
    assert result["speciesImpact"][0]["growthImpact"] == 7
    assert result["speciesImpact"][0]["recoveryTime"] == 14
    assert result["metricsImpact"] == {"ndvi": -19, "moisture": -40, "soilHealth": -16, "carbonCapture": -5}
    assert len(result["recommendations"]) == 5


def test_run_simulation_preserves_species_order(drought_scenario):
    names = ["Teak", "Unknown Fig", "Neem", "Teak"]
    result = run_simulation(drought_scenario, names)
    assert [impact.name for impact in result.species_impact] == names


def test_run_simulation_empty_species():
    scenario = CalamityScenario("drought", severity=50, affected_area=50, duration=3)
    result = run_simulation(scenario, []).to_dict()
    assert result["speciesImpact"] == []
    assert result["metricsImpact"]["carbonCapture"] == -80


def test_run_simulation_is_stateless(drought_scenario):
    first = run_simulation(drought_scenario, ["Neem", "Sal"]).to_dict()
    run_simulation(CalamityScenario("flood", 100, 100, 12), ["Neem"])
    assert run_simulation(drought_scenario, ["Neem", "Sal"]).to_dict() == first


def test_select_strategy():
    assert isinstance(select_strategy(None), LocalSimulation)
    assert isinstance(select_strategy(""), LocalSimulation)

    remote = select_strategy("http://sim.example/", timeout=5)
    assert isinstance(remote, RemoteSimulation)
    assert remote.url == "http://sim.example/api/simulation/run"
    assert remote.timeout == 5


def test_remote_forwards_body_and_relays_json(drought_scenario, simulation_body):
    session = Mock()
    session.post.return_value = _response(payload={"relayed": True, "speciesImpact": []})
    strategy = RemoteSimulation("http://sim.example", timeout=7, session=session)

    result = strategy.run(drought_scenario, ["Neem"], simulation_body)

    assert result == {"relayed": True, "speciesImpact": []}
    session.post.assert_called_once_with(
        "http://sim.example/api/simulation/run", json=simulation_body, timeout=7
    )


def test_remote_non_success_raises(drought_scenario, simulation_body):
    session = Mock()
    session.post.return_value = _response(ok=False, status_code=503, reason="Service Unavailable")
    strategy = RemoteSimulation("http://sim.example", session=session)

    with pytest.raises(RemoteSimulationError) as excinfo:
        strategy.run(drought_scenario, ["Neem"], simulation_body)

    assert excinfo.value.status_code == 503
    assert "503" in str(excinfo.value)


def test_remote_transport_error_raises(drought_scenario, simulation_body):
    session = Mock()
    session.post.side_effect = requests.exceptions.ConnectionError("refused")
    strategy = RemoteSimulation("http://sim.example", session=session)

    with pytest.raises(RemoteSimulationError, match="unreachable"):
        strategy.run(drought_scenario, ["Neem"], simulation_body)


def test_remote_invalid_json_raises(drought_scenario, simulation_body):
    response = _response()
    response.json.side_effect = ValueError("Expecting value")
    session = Mock()
    session.post.return_value = response

    with pytest.raises(RemoteSimulationError, match="invalid JSON"):
        RemoteSimulation("http://sim.example", session=session).run(drought_scenario, [], simulation_body)
