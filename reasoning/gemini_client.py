"""
Habitat Gemini Client
=====================
Thin wrapper over the google.genai SDK used for restoration advisories.

Features:
- Plain text generation
- Structured JSON output (response_mime_type=application/json)
"""

import json
import logging
from typing import Optional, Dict, Any

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

SYSTEM_INSTRUCTION = (
    "You are an expert forest restoration ecologist. "
    "Provide recommendations in valid JSON format only."
)


class HabitatGemini:
    """
    Gemini-backed text generator for the dashboard.

    The API key is passed in by the caller (see backend.config.Settings);
    this class never reads the environment itself.
    """

    def __init__(self, api_key: Optional[str], model_name: str = DEFAULT_MODEL):
        if not api_key:
            raise ValueError(
                "Google API key required. Set GOOGLE_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self.api_key = api_key
        self.client = genai.Client(api_key=api_key)
        self.model_name = model_name

        logger.info(f"Gemini client initialized (model: {self.model_name})")

    def generate(
        self,
        prompt: str,
        use_json: bool = False,
        temperature: float = 0.7,
        max_output_tokens: int = 1000,
    ) -> Dict[str, Any]:
        """
        Generate a response for ``prompt``.

        Returns:
            Response dict with 'text', 'usage' and, if use_json, 'parsed'
            (None when the model did not return valid JSON)
        """
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            system_instruction=SYSTEM_INSTRUCTION,
        )
        if use_json:
            config.response_mime_type = "application/json"

        response = self.client.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=config,
        )

        usage = response.usage_metadata
        result = {
            "text": response.text,
            "usage": {
                "prompt_tokens": getattr(usage, "prompt_token_count", 0) if usage else 0,
                "response_tokens": getattr(usage, "candidates_token_count", 0) if usage else 0,
            },
        }

        if use_json:
            try:
                result["parsed"] = json.loads(response.text or "")
            except json.JSONDecodeError:
                result["parsed"] = None
                result["parse_error"] = "Failed to parse JSON response"

        return result


def create_client(api_key: Optional[str], model_name: str = DEFAULT_MODEL) -> HabitatGemini:
    """Create and return a Habitat Gemini client."""
    return HabitatGemini(api_key=api_key, model_name=model_name)
