"""
Zone fusion
Merges satellite and weather refreshes into zone state.

The two updates write disjoint fields, so they commute, and each is
idempotent for identical inputs.
"""

import logging

from sentinelg.core.constants import REFRESH_MARKER
from sentinelg.zones.models import CloudStatus, Zone

logger = logging.getLogger(__name__)


def clamp_inundation(level: float) -> float:
    """Clamp an inundation estimate into [0, 1]."""
    return min(1.0, max(0.0, float(level)))


def apply_inundation_update(
    zone: Zone,
    level: float,
    cloud_status: CloudStatus,
    marker: str = REFRESH_MARKER,
) -> Zone:
    """
    Apply a satellite-analysis refresh to a zone in place.

    Args:
        zone: Zone to update
        level: Inundation estimate; values outside [0, 1] are clamped
        cloud_status: Imagery cloud status
        marker: Recency label stamped on the zone

    Returns:
        The same zone, updated
    """
    clamped = clamp_inundation(level)
    if clamped != level:
        logger.warning(f"Zone {zone.id}: inundation {level} clamped to {clamped}")

    zone.inundation_level = clamped
    zone.status = CloudStatus(cloud_status)
    zone.last_pass = marker

    logger.info(
        f"Zone {zone.id} satellite refresh: {zone.status.value}, "
        f"inundation={zone.inundation_level:.2f}"
    )
    return zone


def apply_precipitation_update(zone: Zone, mm: float) -> Zone:
    """
    Apply a weather refresh to a zone in place.

    Args:
        zone: Zone to update
        mm: Current precipitation; negative readings are floored at 0

    Returns:
        The same zone, updated
    """
    zone.precipitation = max(0.0, float(mm))
    logger.debug(f"Zone {zone.id} precipitation: {zone.precipitation} mm")
    return zone
