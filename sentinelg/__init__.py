"""
Sentinel-G - Incident Verification & Consensus Engine

Aggregates ground reports, satellite inundation estimates, weather and
crowd votes into a single verified picture per incident.
"""

__version__ = "0.1.0"
