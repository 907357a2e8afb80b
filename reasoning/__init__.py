"""
Habitat Reasoning Engine
========================
Gemini-powered restoration advisories for the dashboard.

Modules:
    gemini_client: Thin google.genai client wrapper
    advisory: Environmental snapshot -> structured restoration recommendation

Example:
    >>> from reasoning import create_client, generate_ai_recommendation
    >>> client = create_client(api_key)
    >>> advice = generate_ai_recommendation(snapshot, client)
    >>> advice['priority_actions']
"""

from .gemini_client import HabitatGemini, create_client, DEFAULT_MODEL
from .advisory import (
    AdvisoryError,
    REQUIRED_SNAPSHOT_FIELDS,
    build_prompt,
    extract_json_object,
    generate_ai_recommendation,
    missing_snapshot_fields,
    placeholder_recommendation,
)

__version__ = "1.0.0"
