"""
Habitat Restoration Scoring
===========================
Drought index, site health score and restoration zones for the map view.

Modules:
    scoring: Pure index, zone and carbon functions
    service: Fetches a site's data and assembles RestorationData

Example:
    >>> from restoration import build_restoration_data, restoration_fetchers
    >>> data = build_restoration_data(lat, lon, restoration_fetchers(lat, lon, settings))
    >>> data.restoration_zones[0].priority
"""

from .scoring import (
    ZonePriority,
    SuccessionSpecies,
    CarbonEstimate,
    RestorationZone,
    compute_drought_index,
    health_score,
    ndvi_from_forest_cover,
    estimate_carbon,
    group_by_succession,
    regional_species,
    zone_priority,
    zone_species,
    generate_restoration_zones,
)
from .service import (
    RestorationData,
    RestorationInputError,
    build_restoration_data,
    check_coordinates,
    fetch_succession_species,
    restoration_fetchers,
)
