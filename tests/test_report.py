import threading
from types import SimpleNamespace

import pytest

from providers import ProviderError, ReportError, build_full_report, fetch_all, provider_fetchers


def _ok(value):
    return lambda: value


def _advisor(snapshot):
    return {"summary": "ok", "seen": sorted(snapshot)}


def test_fetch_all_collects_results():
    results = fetch_all({"weather": _ok({"temp": 20}), "soil": _ok({"pH": 6.5})}, budget=5)
    assert results == {"weather": {"temp": 20}, "soil": {"pH": 6.5}}


def test_fetch_all_prefixes_failure_with_label():
    def failing():
        raise ProviderError("soil", "SoilGrids API error: Bad Gateway")

    with pytest.raises(ReportError) as excinfo:
        fetch_all({"weather": _ok({}), "soil": failing}, budget=5)

    assert str(excinfo.value) == "Soil: Failed to fetch soil data: SoilGrids API error: Bad Gateway"


def test_fetch_all_times_out():
    release = threading.Event()

    def slow():
        release.wait(5)
        return {}

    try:
        with pytest.raises(ReportError, match="Timed out") as excinfo:
            fetch_all({"weather": _ok({}), "ndvi": slow}, budget=0.2)
        assert "NDVI" in str(excinfo.value)
    finally:
        release.set()


def test_build_full_report_shape():
    fetchers = {name: _ok({"name": name}) for name in ["weather", "soil", "species", "forest", "ndvi"]}

    report = build_full_report(19.076, 72.878, fetchers, _advisor, budget=5)

    assert report["success"] is True
    assert report["coordinates"] == {"lat": 19.076, "lon": 72.878}
    assert list(report["data"]) == ["weather", "soil", "species", "forest", "ndvi", "ai_recommendation"]
    assert report["data"]["ai_recommendation"]["seen"] == [
        "coordinates", "forest", "ndvi", "soil", "species", "weather",
    ]
    assert report["metadata"]["data_quality"] == "REAL"
    assert report["metadata"]["fallback_used"] is False
    assert report["metadata"]["sources"]["ai"] == "Google Gemini"
    assert report["processing_time_ms"] >= 0
    assert report["timestamp"].endswith("Z")


def test_build_full_report_uses_placeholder_when_advisory_fails():
    def broken(snapshot):
        raise RuntimeError("quota exceeded")

    report = build_full_report(0, 0, {"weather": _ok({})}, broken, budget=5)

    assert report["success"] is True
    assert report["data"]["ai_recommendation"]["summary"] == "AI recommendation unavailable"
    assert report["data"]["ai_recommendation"]["confidence"] == 0
    assert report["metadata"]["fallback_used"] is True


def test_build_full_report_converts_dataclasses():
    from providers import WeatherData

    weather = WeatherData(temp=20, humidity=50, rainfall=0, wind=1, conditions="clear",
                          pressure=1010, visibility=10)
    report = build_full_report(0, 0, {"weather": _ok(weather)}, _advisor, budget=5)
    assert report["data"]["weather"]["conditions"] == "clear"


def test_provider_fetchers_bind_settings():
    settings = SimpleNamespace(
        provider_timeout=12,
        openweather_api_key="ow-key",
        gfw_api_key="gfw-key",
        sentinelhub_client_id="sh-id",
        sentinelhub_client_secret="sh-secret",
    )

    fetchers = provider_fetchers(19.0, 72.8, 25, settings)

    assert list(fetchers) == ["weather", "soil", "species", "forest", "ndvi"]
    assert fetchers["weather"].args == (19.0, 72.8, "ow-key")
    assert fetchers["species"].args == (19.0, 72.8, 25)
    assert fetchers["ndvi"].keywords == {"radius_km": 1, "timeout": 12}
