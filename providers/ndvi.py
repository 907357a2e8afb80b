"""
Vegetation index provider: Sentinel Hub Statistical API over Sentinel-2 L2A.

Authenticates with OAuth client credentials, then requests daily NDVI, NDMI
and EVI means for a small box around the point over the last 30 days and
reports the most recent interval.
"""

import logging
import math
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, List, Optional

import requests

from simulation.rounding import round_to

from .client import expect_object, post_json
from .errors import ProviderConfigError, ProviderError

logger = logging.getLogger(__name__)

PROVIDER = "NDVI"
TOKEN_URL = "https://services.sentinel-hub.com/oauth/token"
STATISTICS_URL = "https://services.sentinel-hub.com/api/v1/statistics"

KM_PER_DEGREE = 111
LOOKBACK_DAYS = 30
MAX_CLOUD_COVERAGE = 30

EVALSCRIPT = """
//VERSION=3
function setup() {
  return {
    input: [{
      bands: ["B04", "B08", "B11", "B02", "SCL"],
      units: "DN"
    }],
    output: {
      bands: 4,
      sampleType: "FLOAT32"
    }
  };
}

function evaluatePixel(sample) {
  let ndvi = (sample.B08 - sample.B04) / (sample.B08 + sample.B04);
  let ndmi = (sample.B08 - sample.B11) / (sample.B08 + sample.B11);
  let evi = 2.5 * ((sample.B08 - sample.B04) / (sample.B08 + 6 * sample.B04 - 7.5 * sample.B02 + 1));
  return [ndvi, ndmi, evi, sample.SCL];
}
"""


@dataclass
class NDVIData:
    ndvi: float
    ndmi: float
    evi: float
    source: str
    date: str
    cloud_coverage: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def bounding_box(lat: float, lon: float, radius_km: float) -> List[float]:
    """[west, south, east, north] box of roughly ``radius_km`` around the point."""
    lat_offset = radius_km / KM_PER_DEGREE
    lon_offset = radius_km / (KM_PER_DEGREE * math.cos(math.radians(lat)))
    return [lon - lon_offset, lat - lat_offset, lon + lon_offset, lat + lat_offset]


def get_sentinel_token(
    client_id: Optional[str],
    client_secret: Optional[str],
    timeout: float = 15,
    session: Optional[requests.Session] = None,
) -> str:
    if not client_id or not client_secret:
        raise ProviderConfigError(
            PROVIDER, "SENTINELHUB_CLIENT_ID and SENTINELHUB_CLIENT_SECRET are not configured"
        )

    data = post_json(
        PROVIDER, "Sentinel Hub authentication", TOKEN_URL,
        data={"grant_type": "client_credentials", "client_id": client_id, "client_secret": client_secret},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        timeout=timeout, session=session,
    )
    token = data.get("access_token") if isinstance(data, dict) else None
    if not token:
        raise ProviderError(PROVIDER, "Sentinel Hub authentication returned no access token")
    return token


def build_statistics_request(bbox: List[float], start: datetime, end: datetime) -> Dict[str, Any]:
    time_range = {
        "from": start.strftime("%Y-%m-%d") + "T00:00:00Z",
        "to": end.strftime("%Y-%m-%d") + "T23:59:59Z",
    }
    return {
        "input": {
            "bounds": {
                "bbox": bbox,
                "properties": {"crs": "http://www.opengis.net/def/crs/EPSG/0/4326"},
            },
            "data": [{
                "type": "sentinel-2-l2a",
                "dataFilter": {"timeRange": time_range, "maxCloudCoverage": MAX_CLOUD_COVERAGE},
            }],
        },
        "aggregation": {
            "timeRange": time_range,
            "aggregationInterval": {"of": "P1D"},
            "evalscript": EVALSCRIPT,
            "resx": 10,
            "resy": 10,
        },
        "calculations": {"default": {}},
    }


def _band_mean(bands: Dict[str, Any], band: str) -> float:
    return ((bands.get(band) or {}).get("stats") or {}).get("mean") or 0


def parse_statistics(data: Dict[str, Any]) -> NDVIData:
    """Pick the latest interval from a Statistical API response."""
    data = expect_object(PROVIDER, "Sentinel Hub Statistics API", data)
    intervals = data.get("data") or []
    if not intervals or not isinstance(intervals, list):
        raise ProviderError(PROVIDER, "No satellite data available for this location and time period")

    latest = intervals[-1]
    try:
        bands = latest["outputs"]["default"]["bands"]
        date = latest["interval"]["from"]
        ndvi = _band_mean(bands, "B0")
        ndmi = _band_mean(bands, "B1")
        evi = _band_mean(bands, "B2")
        cloud_coverage = _band_mean(bands, "B3")
    except (KeyError, TypeError, AttributeError) as e:
        raise ProviderError(PROVIDER, f"Unexpected Sentinel Hub payload, missing {e}") from e

    return NDVIData(
        ndvi=round_to(max(-1, min(1, ndvi)), 3),
        ndmi=round_to(max(-1, min(1, ndmi)), 3),
        evi=round_to(max(-1, min(3, evi)), 3),
        source="Sentinel-2 L2A",
        date=date,
        cloud_coverage=round_to(cloud_coverage, 2),
    )


def fetch_ndvi_data(
    lat: float,
    lon: float,
    client_id: Optional[str],
    client_secret: Optional[str],
    radius_km: float = 1,
    timeout: float = 30,
    session: Optional[requests.Session] = None,
    now: Optional[datetime] = None,
) -> NDVIData:
    """Fetch recent vegetation indices around (lat, lon)."""
    token = get_sentinel_token(client_id, client_secret, timeout=timeout, session=session)

    end = now or datetime.now(timezone.utc)
    start = end - timedelta(days=LOOKBACK_DAYS)
    body = build_statistics_request(bounding_box(lat, lon, radius_km), start, end)

    data = post_json(
        PROVIDER, "Sentinel Hub Statistics API", STATISTICS_URL, json=body,
        headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        timeout=timeout, session=session,
    )

    result = parse_statistics(data)
    logger.info(f"NDVI at ({lat:.3f}, {lon:.3f}): {result.ndvi} on {result.date}")
    return result
