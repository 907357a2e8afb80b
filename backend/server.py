"""
Habitat Backend API Server
==========================
FastAPI server behind the restoration dashboard:
1. Calamity simulation (local formulas or delegated to another backend)
2. Environmental data panels (weather, soil, species, forest, NDVI)
3. Gemini restoration advisory
4. Full report combining all of the above
5. Restoration zones and site health scoring
"""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from providers import (
    ProviderError,
    ReportError,
    build_full_report,
    fetch_forest_data,
    fetch_ndvi_data,
    fetch_soil_data,
    fetch_species_data,
    fetch_weather_data,
    geocode_location,
    provider_fetchers,
    validate_coordinates,
)
from providers.report import utc_timestamp
from providers.species import DEFAULT_RADIUS_KM, MIN_RADIUS_KM, MAX_RADIUS_KM
from reasoning import (
    AdvisoryError,
    create_client,
    generate_ai_recommendation,
    missing_snapshot_fields,
)
from restoration import (
    RestorationInputError,
    build_restoration_data,
    check_coordinates,
    restoration_fetchers,
)
from restoration.service import MISSING_LOCATION
from simulation import (
    SimulationError,
    SimulationRequest,
    SimulationStrategy,
    known_species,
    select_strategy,
    species_table_dict,
)

from .config import Settings

logger = logging.getLogger(__name__)

SIMULATION_FAILURE = "Failed to run simulation"

CACHE_HEADERS = {
    "weather": "public, s-maxage=1800, stale-while-revalidate=3600",
    "soil": "public, s-maxage=86400, stale-while-revalidate=172800",
    "species": "public, s-maxage=604800, stale-while-revalidate=1209600",
    "forest": "public, s-maxage=86400, stale-while-revalidate=172800",
    "ndvi": "public, s-maxage=86400, stale-while-revalidate=172800",
    "report": "public, s-maxage=3600, stale-while-revalidate=7200",
    "restoration": "public, s-maxage=3600, stale-while-revalidate=7200",
}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def make_advisor(settings: Settings) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    """Snapshot -> recommendation callable with a lazily created Gemini client."""
    client_holder = {}

    def advise(snapshot: Dict[str, Any]) -> Dict[str, Any]:
        if "client" not in client_holder:
            client_holder["client"] = create_client(settings.google_api_key, settings.gemini_model)
        return generate_ai_recommendation(snapshot, client_holder["client"])

    return advise


def error_response(status_code: int, error: str, **extra) -> JSONResponse:
    body = {"error": error}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def parse_coordinates(lat: Optional[str], lon: Optional[str]):
    """
    Parse query-string coordinates.

    Raises:
        ValueError: With a client-facing message if missing or out of range
    """
    if not lat or not lon:
        raise ValueError("Missing required parameters: lat and lon")
    try:
        lat_value, lon_value = float(lat), float(lon)
    except ValueError:
        raise ValueError("Invalid coordinates. Lat must be -90 to 90, lon must be -180 to 180")
    validate_coordinates(lat_value, lon_value)
    return lat_value, lon_value


def parse_radius(radius: Optional[str]) -> float:
    if not radius:
        return DEFAULT_RADIUS_KM
    try:
        value = float(radius)
    except ValueError:
        value = float("nan")
    if not (MIN_RADIUS_KM <= value <= MAX_RADIUS_KM):
        raise ValueError(f"Invalid radius. Must be between {MIN_RADIUS_KM} and {MAX_RADIUS_KM} km")
    return value


def validation_details(error: ValidationError):
    return [
        {"field": ".".join(str(part) for part in item["loc"]), "message": item["msg"]}
        for item in error.errors()
    ]


def create_app(
    settings: Optional[Settings] = None,
    simulation_strategy: Optional[SimulationStrategy] = None,
    advisor: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
    fetchers_factory: Optional[Callable[..., Dict[str, Callable[[], Any]]]] = None,
    restoration_factory: Optional[Callable[..., Dict[str, Callable[[], Any]]]] = None,
) -> FastAPI:
    """
    Build the API app.

    Args:
        settings: Configuration; defaults to Settings.from_env()
        simulation_strategy: Overrides the strategy chosen from settings.backend_url
        advisor: Overrides the Gemini advisory callable
        fetchers_factory: Overrides provider_fetchers(lat, lon, radius_km, settings)
        restoration_factory: Overrides restoration_fetchers(lat, lon, settings)
    """
    settings = settings or Settings.from_env()
    strategy = simulation_strategy or select_strategy(settings.backend_url, timeout=settings.backend_timeout)
    advise = advisor or make_advisor(settings)
    build_fetchers = fetchers_factory or provider_fetchers
    build_restoration_fetchers = restoration_factory or restoration_fetchers

    app = FastAPI(
        title="Habitat API",
        description="Restoration dashboard backend: calamity simulation and environmental data",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.simulation_strategy = strategy

    logger.info(f"Simulation mode: {strategy.name}")

    @app.get("/")
    async def root():
        return {
            "service": "Habitat API",
            "status": "running",
            "simulation_mode": strategy.name,
        }

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "simulation_mode": strategy.name,
            "providers": {
                "weather": bool(settings.openweather_api_key),
                "soil": True,
                "species": True,
                "forest": bool(settings.gfw_api_key),
                "ndvi": bool(settings.sentinelhub_client_id and settings.sentinelhub_client_secret),
                "ai": bool(settings.google_api_key),
                "geocoding": True,
            },
            "timestamp": utc_timestamp(),
        }

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    @app.get("/api/simulation/species")
    async def simulation_species():
        """Species with explicit sensitivity profiles."""
        return {"species": known_species(), "profiles": species_table_dict()}

    @app.post("/api/simulation/run")
    async def run_simulation_endpoint(request: Request):
        """
        Run a calamity simulation.

        Body: {scenario: {type, severity, affectedArea, duration}, selectedSpecies, lat, lng}
        """
        raw = await request.body()
        try:
            payload = json.loads(raw)
        except ValueError:
            return error_response(400, "Request body must be valid JSON")

        try:
            simulation_request = SimulationRequest.model_validate(payload)
        except ValidationError as e:
            logger.info(f"Rejected simulation request: {e.error_count()} validation error(s)")
            return error_response(400, "Invalid simulation request", details=validation_details(e))

        scenario = simulation_request.scenario.to_scenario()
        try:
            result = await run_in_threadpool(
                strategy.run, scenario, simulation_request.selected_species, payload
            )
        except SimulationError as e:
            logger.error(f"Simulation error: {e}")
            return error_response(500, SIMULATION_FAILURE)
        except Exception:
            logger.exception("Simulation error")
            return error_response(500, SIMULATION_FAILURE)

        return result

    # ------------------------------------------------------------------
    # Environmental data panels
    # ------------------------------------------------------------------

    def provider_response(name: str, fetch: Callable[[], Any]) -> JSONResponse:
        try:
            data = fetch()
        except ProviderError as e:
            logger.error(f"{name.capitalize()} API error: {e}")
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

        return JSONResponse(
            content={"success": True, "data": data.to_dict()},
            headers={"Cache-Control": CACHE_HEADERS[name]},
        )

    @app.get("/api/weather")
    def weather(lat: Optional[str] = None, lon: Optional[str] = None):
        try:
            lat_value, lon_value = parse_coordinates(lat, lon)
        except ValueError as e:
            return error_response(400, str(e))
        return provider_response("weather", lambda: fetch_weather_data(
            lat_value, lon_value, settings.openweather_api_key, timeout=settings.provider_timeout))

    @app.get("/api/soil")
    def soil(lat: Optional[str] = None, lon: Optional[str] = None):
        try:
            lat_value, lon_value = parse_coordinates(lat, lon)
        except ValueError as e:
            return error_response(400, str(e))
        return provider_response("soil", lambda: fetch_soil_data(
            lat_value, lon_value, timeout=settings.provider_timeout))

    @app.get("/api/species")
    def species(lat: Optional[str] = None, lon: Optional[str] = None, radius: Optional[str] = None):
        try:
            lat_value, lon_value = parse_coordinates(lat, lon)
            radius_km = parse_radius(radius)
        except ValueError as e:
            return error_response(400, str(e))
        return provider_response("species", lambda: fetch_species_data(
            lat_value, lon_value, radius_km, timeout=settings.provider_timeout))

    @app.get("/api/forest")
    def forest(lat: Optional[str] = None, lon: Optional[str] = None):
        try:
            lat_value, lon_value = parse_coordinates(lat, lon)
        except ValueError as e:
            return error_response(400, str(e))
        return provider_response("forest", lambda: fetch_forest_data(
            lat_value, lon_value, settings.gfw_api_key, timeout=settings.provider_timeout))

    @app.get("/api/ndvi")
    def ndvi(lat: Optional[str] = None, lon: Optional[str] = None):
        try:
            lat_value, lon_value = parse_coordinates(lat, lon)
        except ValueError as e:
            return error_response(400, str(e))
        return provider_response("ndvi", lambda: fetch_ndvi_data(
            lat_value, lon_value,
            settings.sentinelhub_client_id, settings.sentinelhub_client_secret,
            timeout=settings.provider_timeout))

    # ------------------------------------------------------------------
    # Advisory & full report
    # ------------------------------------------------------------------

    @app.post("/api/ai/recommendation")
    def ai_recommendation(snapshot: Dict[str, Any]):
        missing = missing_snapshot_fields(snapshot)
        if missing:
            return error_response(
                400, "Missing required data fields: weather, soil, species, forest, ndvi, coordinates",
                missing=missing,
            )

        try:
            recommendation = advise(snapshot)
        except (AdvisoryError, ValueError) as e:
            logger.error(f"AI Recommendation API error: {e}")
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

        return {"success": True, "data": recommendation}

    @app.get("/api/report/full")
    def full_report(lat: Optional[str] = None, lon: Optional[str] = None, radius: Optional[str] = None):
        started_at = time.monotonic()
        try:
            lat_value, lon_value = parse_coordinates(lat, lon)
            radius_km = parse_radius(radius)
        except ValueError as e:
            return error_response(400, str(e))

        fetchers = build_fetchers(lat_value, lon_value, radius_km, settings)
        try:
            report = build_full_report(
                lat_value, lon_value, fetchers, advise,
                budget=settings.report_budget, started_at=started_at,
            )
        except ReportError as e:
            logger.error(f"[Full Report] Error: {e}")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": str(e),
                    "processing_time_ms": int((time.monotonic() - started_at) * 1000),
                    "timestamp": utc_timestamp(),
                },
            )

        return JSONResponse(content=report, headers={"Cache-Control": CACHE_HEADERS["report"]})

    # ------------------------------------------------------------------
    # Restoration zones
    # ------------------------------------------------------------------

    def restoration_response(location: Optional[str], lat: Optional[float], lon: Optional[float],
                             headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        try:
            if lat is None or lon is None:
                coordinates = geocode_location(
                    location, settings.mapbox_access_token, timeout=settings.provider_timeout)
                lat, lon = coordinates.lat, coordinates.lon
            data = build_restoration_data(
                lat, lon, build_restoration_fetchers(lat, lon, settings), budget=settings.report_budget)
        except (ProviderError, ReportError) as e:
            logger.error(f"Restoration API error: {e}")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Failed to fetch restoration data",
                    "message": str(e),
                    "timestamp": utc_timestamp(),
                },
            )

        return JSONResponse(
            content={"success": True, "timestamp": utc_timestamp(), "data": data.to_dict()},
            headers=headers,
        )

    @app.get("/api/restoration")
    def restoration_get(location: Optional[str] = None, lat: Optional[str] = None, lon: Optional[str] = None):
        """Query: location, or lat and lon (coordinates win when both are given)."""
        if not location and (not lat or not lon):
            return error_response(400, "Missing parameters", message=MISSING_LOCATION)

        lat_value = lon_value = None
        if lat and lon:
            try:
                lat_value, lon_value = check_coordinates(float(lat), float(lon))
            except RestorationInputError as e:
                return error_response(400, e.error, message=e.message)
            except ValueError:
                return error_response(400, "Invalid coordinates", message="lat and lon must be valid numbers")

        return restoration_response(location, lat_value, lon_value,
                                    headers={"Cache-Control": CACHE_HEADERS["restoration"]})

    @app.post("/api/restoration")
    async def restoration_post(request: Request):
        """Body: {"location": "Mumbai, India"} or {"lat": 19.076, "lon": 72.878}"""
        try:
            body = json.loads(await request.body())
        except ValueError:
            return error_response(400, "Request body must be valid JSON")
        if not isinstance(body, dict):
            return error_response(400, "Request body must be a JSON object")

        location, lat, lon = body.get("location"), body.get("lat"), body.get("lon")
        if not location and (lat is None or lon is None):
            return error_response(400, "Missing parameters", message=MISSING_LOCATION)

        lat_value = lon_value = None
        if lat is not None and lon is not None:
            try:
                lat_value, lon_value = check_coordinates(lat, lon)
            except RestorationInputError as e:
                return error_response(400, e.error, message=e.message)

        return await run_in_threadpool(restoration_response, location, lat_value, lon_value)

    return app


def get_app() -> FastAPI:
    """uvicorn factory: uvicorn backend.server:get_app --factory"""
    settings = Settings.from_env()
    configure_logging(settings)
    return create_app(settings)


# Run with: uvicorn backend.server:get_app --factory --reload --port 8000
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(get_app(), host="0.0.0.0", port=8000)
