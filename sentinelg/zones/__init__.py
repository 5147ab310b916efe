"""
Sentinel-G - Zones Module
Satellite zones, the zone registry and zone fusion.
"""

from sentinelg.zones.models import CloudStatus, Zone
from sentinelg.zones.fusion import (
    apply_inundation_update,
    apply_precipitation_update,
    clamp_inundation,
)
from sentinelg.zones.registry import ZoneRegistry

__all__ = [
    "CloudStatus",
    "Zone",
    "ZoneRegistry",
    "apply_inundation_update",
    "apply_precipitation_update",
    "clamp_inundation",
]
