"""
Habitat Backend Configuration
All settings in one place, read from the environment (and .env) once.

The server receives a Settings instance at construction time; route code
never reads os.environ directly.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
]


def _env(name: str) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    return value or None


def _env_float(name: str, default: float) -> float:
    value = _env(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{value}'") from None


@dataclass(frozen=True)
class Settings:
    # When set, simulations are delegated to <backend_url>/api/simulation/run
    backend_url: Optional[str] = None

    # Provider credentials
    openweather_api_key: Optional[str] = None
    gfw_api_key: Optional[str] = None
    sentinelhub_client_id: Optional[str] = None
    sentinelhub_client_secret: Optional[str] = None
    mapbox_access_token: Optional[str] = None

    # AI advisory
    google_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"

    # Timeouts (seconds)
    provider_timeout: float = 30.0
    backend_timeout: float = 30.0
    report_budget: float = 60.0

    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        """Load .env (without overriding real env vars) and build Settings."""
        load_dotenv(env_file or PROJECT_ROOT / ".env")

        origins = _env("CORS_ORIGINS")
        return cls(
            backend_url=_env("BACKEND_URL"),
            openweather_api_key=_env("OPENWEATHER_API_KEY"),
            gfw_api_key=_env("GFW_API_KEY"),
            sentinelhub_client_id=_env("SENTINELHUB_CLIENT_ID"),
            sentinelhub_client_secret=_env("SENTINELHUB_CLIENT_SECRET"),
            mapbox_access_token=_env("MAPBOX_ACCESS_TOKEN"),
            google_api_key=_env("GOOGLE_API_KEY") or _env("GOOGLE_AI_API_KEY"),
            gemini_model=_env("GEMINI_MODEL") or cls.gemini_model,
            provider_timeout=_env_float("PROVIDER_TIMEOUT", cls.provider_timeout),
            backend_timeout=_env_float("BACKEND_TIMEOUT", cls.backend_timeout),
            report_budget=_env_float("REPORT_BUDGET_SECONDS", cls.report_budget),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] if origins else list(DEFAULT_CORS_ORIGINS),
            log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        )

    @property
    def simulation_mode(self) -> str:
        return "remote" if self.backend_url else "local"
