"""
Forest provider: Global Forest Watch data API.

Tree cover density is required; tree cover loss and recent GLAD alerts are
best-effort and default to 0 when their queries fail.
"""

import json
import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional

import requests

from simulation.rounding import round_to

from .client import expect_object, get_json
from .errors import ProviderConfigError, ProviderError

logger = logging.getLogger(__name__)

PROVIDER = "forest"
GFW_DATASET_URL = "https://data-api.globalforestwatch.org/dataset/{dataset}/latest/query"

# Years covered by the UMD tree cover loss layer (2001-2023)
LOSS_YEARS = 23

COVER_SQL = "SELECT tcd_2000 FROM data WHERE ST_Intersects({point}, geom) LIMIT 1"
LOSS_SQL = (
    "SELECT SUM(area__ha) as loss_area FROM data WHERE ST_Intersects({point}, geom) "
    "AND umd_tree_cover_density_2000__threshold >= 30"
)
ALERTS_SQL = (
    "SELECT COUNT(*) as alert_count FROM data WHERE ST_DWithin({point}, geom, 0.1) "
    "AND alert__date >= CURRENT_DATE - INTERVAL '90 days'"
)


@dataclass
class ForestData:
    forest_cover: float        # percent canopy density (2000 baseline)
    tree_cover_loss: float     # hectares lost since 2001
    alerts: int                # GLAD alerts in the last 90 days
    deforestation_rate: float  # hectares per year
    protected_areas: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _point_sql(lat: float, lon: float) -> str:
    geojson = json.dumps({"type": "Point", "coordinates": [lon, lat]})
    return f"ST_SetSRID(ST_GeomFromGeoJSON('{geojson}'),4326)"


def _query(dataset: str, sql: str, api_key: str, timeout: float, session) -> Dict[str, Any]:
    headers = {"x-api-key": api_key, "Content-Type": "application/json"}
    payload = get_json(
        PROVIDER, "GFW API", GFW_DATASET_URL.format(dataset=dataset),
        params={"sql": sql}, headers=headers, timeout=timeout, session=session,
    )
    return expect_object(PROVIDER, "GFW API", payload)


def _rows(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = payload.get("data")
    if not isinstance(rows, list):
        return []
    return [row for row in rows if isinstance(row, dict)]


def _first_value(payload: Dict[str, Any], key: str) -> float:
    rows = _rows(payload)
    if not rows:
        return 0
    return rows[0].get(key) or 0


def fetch_forest_data(
    lat: float,
    lon: float,
    api_key: Optional[str],
    timeout: float = 30,
    session: Optional[requests.Session] = None,
) -> ForestData:
    """
    Fetch forest cover, historic loss and recent alerts at (lat, lon).

    Raises:
        ProviderConfigError: If no GFW key is configured
        ProviderError: If the cover query fails or has no data
    """
    if not api_key:
        raise ProviderConfigError(PROVIDER, "GFW_API_KEY is not configured. Please add it to .env file.")

    point = _point_sql(lat, lon)

    cover = _query("umd_tree_cover_density_2000", COVER_SQL.format(point=point), api_key, timeout, session)
    if not _rows(cover):
        raise ProviderError(PROVIDER, "No forest cover data available for this location")
    forest_cover = _first_value(cover, "tcd_2000")

    tree_cover_loss = 0
    try:
        loss = _query("umd_tree_cover_loss", LOSS_SQL.format(point=point), api_key, timeout, session)
        tree_cover_loss = _first_value(loss, "loss_area")
    except ProviderError as e:
        logger.warning(f"Tree cover loss query failed, assuming 0: {e}")

    alerts = 0
    try:
        alert_data = _query("umd_glad_landsat_alerts", ALERTS_SQL.format(point=point), api_key, timeout, session)
        alerts = int(_first_value(alert_data, "alert_count"))
    except ProviderError as e:
        logger.warning(f"GLAD alerts query failed, assuming 0: {e}")

    deforestation_rate = round_to(tree_cover_loss / LOSS_YEARS, 2) if tree_cover_loss > 0 else 0

    return ForestData(
        forest_cover=min(100, max(0, round_to(forest_cover, 1))),
        tree_cover_loss=round_to(tree_cover_loss, 1),
        alerts=alerts,
        deforestation_rate=deforestation_rate,
        protected_areas=False,
    )
