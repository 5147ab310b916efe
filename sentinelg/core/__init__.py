"""
Sentinel-G - Core Utilities
Central configuration, logging, error taxonomy and geo helpers.
"""

from sentinelg.core.config import settings, get_settings, Settings
from sentinelg.core.exceptions import (
    SentinelError,
    NotFoundError,
    DuplicateIdError,
    DuplicateVoteError,
    AlreadyInProgressError,
    InvalidTransitionError,
    ImmutableFieldError,
    SignalUnavailableError,
)
from sentinelg.core.geo_utils import (
    GeoPoint,
    haversine_distance,
    point_in_polygon,
    calculate_centroid,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    # Errors
    "SentinelError",
    "NotFoundError",
    "DuplicateIdError",
    "DuplicateVoteError",
    "AlreadyInProgressError",
    "InvalidTransitionError",
    "ImmutableFieldError",
    "SignalUnavailableError",
    # Geo
    "GeoPoint",
    "haversine_distance",
    "point_in_polygon",
    "calculate_centroid",
]
