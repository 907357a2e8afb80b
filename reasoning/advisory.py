"""
Restoration Advisory
====================
Turns an aggregated environmental snapshot (weather, soil, species, forest,
vegetation index) into a structured restoration recommendation using Gemini.

The full-report route treats the advisory as optional: on any failure it
substitutes placeholder_recommendation() instead of failing the report.
"""

import json
import logging
import re
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

REQUIRED_SNAPSHOT_FIELDS = ["weather", "soil", "species", "forest", "ndvi", "coordinates"]

RECOMMENDATION_FIELDS = [
    "summary",
    "priority_actions",
    "species_recommendations",
    "risk_assessment",
    "timeline",
    "confidence",
]

ADVISORY_PROMPT = """You are an expert forest restoration ecologist. Analyze the following environmental data and provide restoration recommendations.

Location: {lat}, {lon}

Weather Data:
- Temperature: {weather[temp]}°C
- Humidity: {weather[humidity]}%
- Rainfall: {weather[rainfall]}mm
- Wind: {weather[wind]}m/s

Soil Data:
- pH: {soil[pH]}
- Clay: {soil[clay]}%
- Sand: {soil[sand]}%
- Organic Carbon: {soil[organic_carbon]}g/kg
- Nitrogen: {soil[nitrogen]}g/kg

Forest Data:
- Forest Cover: {forest[forest_cover]}%
- Deforestation Alerts: {forest[alerts]}
- Tree Cover Loss: {forest[tree_cover_loss]}ha

Vegetation Index:
- NDVI: {ndvi[ndvi]}
- NDMI: {ndvi[ndmi]}
- EVI: {ndvi[evi]}

Existing Species:
{tree_species}

Provide a comprehensive restoration recommendation in JSON format:
{{
  "summary": "Brief 2-3 sentence overview",
  "priority_actions": ["action1", "action2", "action3"],
  "species_recommendations": ["species1", "species2", "species3"],
  "risk_assessment": "Assessment of risks and challenges",
  "timeline": "Recommended timeline for restoration",
  "confidence": 0.85
}}"""


class AdvisoryError(Exception):
    """The AI provider failed or returned an unusable recommendation."""


class _Missing(dict):
    """format_map helper: unknown keys render as 'N/A'."""

    def __missing__(self, key):
        return "N/A"


def missing_snapshot_fields(snapshot: Dict[str, Any]) -> List[str]:
    return [name for name in REQUIRED_SNAPSHOT_FIELDS if not snapshot.get(name)]


def build_prompt(snapshot: Dict[str, Any]) -> str:
    """Render the advisory prompt from a snapshot of plain dicts."""
    coordinates = snapshot.get("coordinates") or {}
    species = snapshot.get("species") or {}
    tree_species = species.get("tree_species") or []

    return ADVISORY_PROMPT.format(
        lat=coordinates.get("lat", "N/A"),
        lon=coordinates.get("lon", coordinates.get("lng", "N/A")),
        weather=_Missing(snapshot.get("weather") or {}),
        soil=_Missing(snapshot.get("soil") or {}),
        forest=_Missing(snapshot.get("forest") or {}),
        ndvi=_Missing(snapshot.get("ndvi") or {}),
        tree_species=", ".join(tree_species[:10]) or "None recorded",
    )


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Pull the outermost {...} block out of free text."""
    if not isinstance(text, str):
        return None
    match = re.search(r"\{.*\}", text, re.DOTALL)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def normalize_recommendation(parsed: Dict[str, Any]) -> Dict[str, Any]:
    missing = [name for name in RECOMMENDATION_FIELDS if name not in parsed]
    if missing:
        raise AdvisoryError(f"Recommendation missing fields: {', '.join(missing)}")
    return {name: parsed[name] for name in RECOMMENDATION_FIELDS}


def generate_ai_recommendation(snapshot: Dict[str, Any], client) -> Dict[str, Any]:
    """
    Ask Gemini for a restoration recommendation.

    Args:
        snapshot: Dict with weather, soil, species, forest, ndvi and
            coordinates ({lat, lon}) records
        client: A HabitatGemini (or anything with the same generate())

    Returns:
        Dict with summary, priority_actions, species_recommendations,
        risk_assessment, timeline and confidence

    Raises:
        AdvisoryError: If generation fails or the output cannot be parsed
    """
    prompt = build_prompt(snapshot)

    try:
        response = client.generate(prompt, use_json=True)
    except Exception as e:
        raise AdvisoryError(f"Failed to generate AI recommendation: {e}") from e

    parsed = response.get("parsed")
    if not isinstance(parsed, dict):
        parsed = extract_json_object(response.get("text"))
    if parsed is None:
        raise AdvisoryError("Failed to parse JSON from Gemini response")

    return normalize_recommendation(parsed)


def placeholder_recommendation() -> Dict[str, Any]:
    """Advisory substituted into the full report when generation fails."""
    return {
        "summary": "AI recommendation unavailable",
        "priority_actions": [],
        "species_recommendations": [],
        "risk_assessment": "Unable to generate assessment",
        "timeline": "N/A",
        "confidence": 0,
    }
