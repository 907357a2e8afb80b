import pytest

from backend.config import DEFAULT_CORS_ORIGINS, Settings

ENV_VARS = [
    "BACKEND_URL", "OPENWEATHER_API_KEY", "GFW_API_KEY", "SENTINELHUB_CLIENT_ID",
    "SENTINELHUB_CLIENT_SECRET", "GOOGLE_API_KEY", "GOOGLE_AI_API_KEY", "GEMINI_MODEL",
    "PROVIDER_TIMEOUT", "BACKEND_TIMEOUT", "REPORT_BUDGET_SECONDS", "CORS_ORIGINS", "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so teardown also removes values written by load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return tmp_path / "missing.env"


def test_defaults(clean_env):
    settings = Settings.from_env(env_file=clean_env)

    assert settings.backend_url is None
    assert settings.simulation_mode == "local"
    assert settings.gemini_model == "gemini-2.5-flash"
    assert settings.report_budget == 60.0
    assert settings.cors_origins == DEFAULT_CORS_ORIGINS
    assert settings.log_level == "INFO"


def test_reads_environment(clean_env, monkeypatch):
    monkeypatch.setenv("BACKEND_URL", "http://sim.example")
    monkeypatch.setenv("GOOGLE_AI_API_KEY", "g-key")
    monkeypatch.setenv("PROVIDER_TIMEOUT", "12.5")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env(env_file=clean_env)

    assert settings.simulation_mode == "remote"
    assert settings.google_api_key == "g-key"
    assert settings.provider_timeout == 12.5
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.log_level == "DEBUG"


def test_blank_backend_url_means_local(clean_env, monkeypatch):
    monkeypatch.setenv("BACKEND_URL", "   ")
    assert Settings.from_env(env_file=clean_env).simulation_mode == "local"


def test_reads_dotenv_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OPENWEATHER_API_KEY=from-file\nGFW_API_KEY=gfw-file\n")

    settings = Settings.from_env(env_file=env_file)

    assert settings.openweather_api_key == "from-file"
    assert settings.gfw_api_key == "gfw-file"


def test_invalid_number(clean_env, monkeypatch):
    monkeypatch.setenv("REPORT_BUDGET_SECONDS", "soon")
    with pytest.raises(ValueError, match="REPORT_BUDGET_SECONDS must be a number") as excinfo:
        Settings.from_env(env_file=clean_env)

    assert excinfo.value.__cause__ is None
    assert excinfo.value.__suppress_context__ is True
