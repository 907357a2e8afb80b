"""
Shared HTTP plumbing for provider clients.

Every provider call goes through get_json()/post_json() so that transport
errors, non-2xx statuses and undecodable bodies all surface as ProviderError.
"""

import logging
from typing import Any, Dict, Optional

import requests

from .errors import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15
USER_AGENT = "HabitatDashboard/1.0 (Restoration Monitoring)"


def _transport(session: Optional[requests.Session]):
    """The caller's session, or the requests module for one-off calls."""
    return session if session is not None else requests


def _headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = {"User-Agent": USER_AGENT}
    merged.update(headers or {})
    return merged


def _decode(provider: str, label: str, response: requests.Response) -> Any:
    if not response.ok:
        detail = response.reason or str(response.status_code)
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("message"):
                detail = body["message"]
        except ValueError:
            pass
        raise ProviderError(provider, f"{label} error: {detail}")

    try:
        return response.json()
    except ValueError as e:
        raise ProviderError(provider, f"Invalid response from {label}: {e}") from e


def expect_object(provider: str, label: str, data: Any) -> Dict[str, Any]:
    """Raise ProviderError unless a decoded body is a JSON object."""
    if not isinstance(data, dict):
        raise ProviderError(provider, f"Invalid response from {label}: expected a JSON object")
    return data


def get_json(
    provider: str,
    label: str,
    url: str,
    params: Any = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Any:
    """GET ``url`` and decode JSON, raising ProviderError on any failure."""
    try:
        response = _transport(session).get(url, params=params, headers=_headers(headers), timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise ProviderError(provider, f"{label} timed out after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        raise ProviderError(provider, f"{label} request failed: {e}") from e
    return _decode(provider, label, response)


def post_json(
    provider: str,
    label: str,
    url: str,
    json: Any = None,
    data: Any = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Any:
    """POST to ``url`` and decode JSON, raising ProviderError on any failure."""
    try:
        response = _transport(session).post(
            url, json=json, data=data, headers=_headers(headers), timeout=timeout
        )
    except requests.exceptions.Timeout as e:
        raise ProviderError(provider, f"{label} timed out after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        raise ProviderError(provider, f"{label} request failed: {e}") from e
    return _decode(provider, label, response)


def validate_coordinates(lat: float, lon: float) -> None:
    """
    Raises:
        ValueError: If lat/lon are NaN or outside [-90, 90] / [-180, 180]
    """
    if lat != lat or lon != lon:
        raise ValueError("Invalid coordinates. Lat and lon must be numbers")
    if not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
        raise ValueError("Invalid coordinates. Lat must be -90 to 90, lon must be -180 to 180")
