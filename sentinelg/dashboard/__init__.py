"""
Sentinel-G - Dashboard Module
"""

from sentinelg.dashboard.service import DEFAULT_SATELLITE_IMAGE, DashboardService

__all__ = [
    "DEFAULT_SATELLITE_IMAGE",
    "DashboardService",
]
