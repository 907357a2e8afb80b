"""
Species occurrence provider: GBIF occurrence search around a point.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional

import requests

from .client import expect_object, get_json
from .errors import ProviderError

logger = logging.getLogger(__name__)

PROVIDER = "species"
GBIF_URL = "https://api.gbif.org/v1/occurrence/search"

DEFAULT_RADIUS_KM = 50
MIN_RADIUS_KM = 1
MAX_RADIUS_KM = 200
SEARCH_LIMIT = 300

MAX_OBSERVATIONS = 50
MAX_PLANT_SPECIES = 30
MAX_TREE_SPECIES = 20

# Families that mostly contain trees
TREE_FAMILIES = {
    "Fabaceae", "Dipterocarpaceae", "Fagaceae", "Pinaceae",
    "Moraceae", "Meliaceae", "Anacardiaceae", "Myrtaceae",
    "Lauraceae", "Sapindaceae", "Malvaceae", "Combretaceae",
}


@dataclass
class SpeciesObservation:
    scientificName: str
    kingdom: str
    count: int = 1
    commonName: Optional[str] = None
    family: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SpeciesData:
    total_observations: int
    unique_species: int
    observations: List[SpeciesObservation] = field(default_factory=list)
    plant_species: List[str] = field(default_factory=list)
    tree_species: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["observations"] = [obs.to_dict() for obs in self.observations]
        return result


def aggregate_occurrences(data: Dict[str, Any]) -> SpeciesData:
    """Deduplicate GBIF occurrences by scientific name and rank by count."""
    data = expect_object(PROVIDER, "GBIF API", data)
    results = data.get("results") or []
    if not isinstance(results, list):
        raise ProviderError(PROVIDER, "Invalid response from GBIF API: results is not a list")
    if not results:
        raise ProviderError(
            PROVIDER, "No species observations found in this area. Try increasing the search radius."
        )

    by_name: Dict[str, SpeciesObservation] = {}
    for record in results:
        if not isinstance(record, dict):
            continue
        name = record.get("scientificName")
        if not name:
            continue
        if name in by_name:
            by_name[name].count += 1
        else:
            by_name[name] = SpeciesObservation(
                scientificName=name,
                commonName=record.get("vernacularName"),
                kingdom=record.get("kingdom") or "Unknown",
                family=record.get("family"),
            )

    # Stable sort keeps first-seen order among equal counts
    observations = sorted(by_name.values(), key=lambda obs: obs.count, reverse=True)

    plants = [obs for obs in observations if obs.kingdom == "Plantae"]
    trees = [obs for obs in plants if obs.family in TREE_FAMILIES]

    return SpeciesData(
        total_observations=data.get("count", len(results)),
        unique_species=len(observations),
        observations=observations[:MAX_OBSERVATIONS],
        plant_species=[obs.scientificName for obs in plants][:MAX_PLANT_SPECIES],
        tree_species=[obs.scientificName for obs in trees][:MAX_TREE_SPECIES],
    )


def fetch_species_data(
    lat: float,
    lon: float,
    radius_km: float = DEFAULT_RADIUS_KM,
    timeout: float = 30,
    session: Optional[requests.Session] = None,
) -> SpeciesData:
    """Fetch recent human observations within ``radius_km`` of (lat, lon)."""
    params = [
        ("decimalLatitude", lat),
        ("decimalLongitude", lon),
        ("radius", radius_km * 1000),
        ("limit", SEARCH_LIMIT),
        ("basisOfRecord", "HUMAN_OBSERVATION"),
        ("basisOfRecord", "OBSERVATION"),
        ("hasCoordinate", "true"),
        ("hasGeospatialIssue", "false"),
    ]
    data = get_json(PROVIDER, "GBIF API", GBIF_URL, params=params, timeout=timeout, session=session)

    species = aggregate_occurrences(data)
    logger.info(
        f"GBIF at ({lat:.3f}, {lon:.3f}): {species.unique_species} species, "
        f"{len(species.tree_species)} tree species"
    )
    return species
