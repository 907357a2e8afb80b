from unittest.mock import Mock

import pytest

from reasoning import (
    AdvisoryError,
    build_prompt,
    extract_json_object,
    generate_ai_recommendation,
    missing_snapshot_fields,
    placeholder_recommendation,
)

RECOMMENDATION = {
    "summary": "Degraded dry forest with good soil.",
    "priority_actions": ["Fence grazing areas", "Assisted natural regeneration"],
    "species_recommendations": ["Azadirachta indica", "Tectona grandis"],
    "risk_assessment": "Moderate fire risk",
    "timeline": "3-5 years",
    "confidence": 0.82,
}

SNAPSHOT = {
    "weather": {"temp": 31.2, "humidity": 60, "rainfall": 0, "wind": 2.1},
    "soil": {"pH": 6.8, "clay": 22.0, "sand": 40.1, "organic_carbon": 12.4, "nitrogen": 1.1},
    "species": {"tree_species": ["Azadirachta indica", "Ficus benghalensis"]},
    "forest": {"forest_cover": 35.0, "alerts": 2, "tree_cover_loss": 12.5},
    "ndvi": {"ndvi": 0.42, "ndmi": 0.1, "evi": 0.5},
    "coordinates": {"lat": 19.076, "lon": 72.878},
}


def test_missing_snapshot_fields():
    assert missing_snapshot_fields(SNAPSHOT) == []
    assert missing_snapshot_fields({"weather": {"temp": 1}}) == [
        "soil", "species", "forest", "ndvi", "coordinates",
    ]


def test_build_prompt_includes_snapshot_values():
    prompt = build_prompt(SNAPSHOT)
    assert "Location: 19.076, 72.878" in prompt
    assert "Temperature: 31.2°C" in prompt
    assert "Forest Cover: 35.0%" in prompt
    assert "Azadirachta indica, Ficus benghalensis" in prompt
    assert '"priority_actions"' in prompt


def test_build_prompt_marks_missing_values():
    snapshot = dict(SNAPSHOT, ndvi={"ndvi": 0.4})
    prompt = build_prompt(snapshot)
    assert "NDMI: N/A" in prompt


def test_extract_json_object():
    text = 'Here you go:\n```json\n{"summary": "x", "confidence": 0.5}\n```'
    assert extract_json_object(text) == {"summary": "x", "confidence": 0.5}
    assert extract_json_object("no json here") is None
    assert extract_json_object("{broken") is None


def test_generate_uses_parsed_json():
    client = Mock()
    client.generate.return_value = {"text": "", "parsed": dict(RECOMMENDATION, extra="dropped")}

    result = generate_ai_recommendation(SNAPSHOT, client)

    assert result == RECOMMENDATION
    assert client.generate.call_args.kwargs["use_json"] is True


def test_generate_falls_back_to_text_extraction():
    import json

    client = Mock()
    client.generate.return_value = {"text": "Result: " + json.dumps(RECOMMENDATION), "parsed": None}

    assert generate_ai_recommendation(SNAPSHOT, client) == RECOMMENDATION


def test_generate_rejects_incomplete_recommendation():
    client = Mock()
    client.generate.return_value = {"text": "", "parsed": {"summary": "only this"}}

    with pytest.raises(AdvisoryError, match="priority_actions"):
        generate_ai_recommendation(SNAPSHOT, client)


def test_generate_wraps_client_errors():
    client = Mock()
    client.generate.side_effect = RuntimeError("429 quota")

    with pytest.raises(AdvisoryError, match="429 quota"):
        generate_ai_recommendation(SNAPSHOT, client)


def test_generate_unparseable_text():
    client = Mock()
    client.generate.return_value = {"text": "I cannot help with that", "parsed": None}

    with pytest.raises(AdvisoryError, match="Failed to parse"):
        generate_ai_recommendation(SNAPSHOT, client)


def test_placeholder_has_every_field():
    placeholder = placeholder_recommendation()
    assert set(placeholder) == set(RECOMMENDATION)
    assert placeholder["confidence"] == 0


@pytest.mark.parametrize("response", [
    {"text": "42", "parsed": 42},
    {"text": '"just a string"', "parsed": "just a string"},
    {"text": "[1, 2]", "parsed": [1, 2]},
    {"text": None, "parsed": None},
])
def test_generate_rejects_non_object_output(response):
    client = Mock()
    client.generate.return_value = response

    with pytest.raises(AdvisoryError, match="Failed to parse"):
        generate_ai_recommendation(SNAPSHOT, client)


def test_extract_json_object_ignores_non_text():
    assert extract_json_object(None) is None
    assert extract_json_object(42) is None
