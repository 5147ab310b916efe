"""
Sentinel-G - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, List, Tuple

# =============================================================================
# SATELLITE ZONES (Barak Valley, Assam)
# =============================================================================

# Seed registry: each zone is (id, name, status, inundation, last_pass, vertices)
# Vertices are (x, y, lat, lng) with x/y on the 0-100 schematic grid.
ZONE_REGISTRY: List[Dict] = [
    {
        "id": "Z1",
        "name": "Silchar North",
        "status": "HEAVY_CLOUD",
        "inundation_level": 0.8,
        "last_pass": "10 mins ago",
        "boundary": [
            (10, 10, 24.85, 92.75),
            (50, 10, 24.85, 92.85),
            (50, 50, 24.80, 92.85),
            (10, 50, 24.80, 92.75),
        ],
    },
    {
        "id": "Z2",
        "name": "Karimganj Sector",
        "status": "CLEAR",
        "inundation_level": 0.2,
        "last_pass": "1 hour ago",
        "boundary": [
            (60, 10, 24.88, 92.35),
            (90, 10, 24.88, 92.40),
            (90, 50, 24.84, 92.40),
            (60, 50, 24.84, 92.35),
        ],
    },
    {
        "id": "Z3",
        "name": "Barak Valley Lowlands",
        "status": "PARTIAL_CLOUD",
        "inundation_level": 0.6,
        "last_pass": "30 mins ago",
        "boundary": [
            (10, 60, 24.75, 92.75),
            (90, 60, 24.75, 92.85),
            (90, 90, 24.70, 92.85),
            (10, 90, 24.70, 92.75),
        ],
    },
]

# Ground reports present when a session starts: offsets are minutes in the past
SEED_REPORTS: List[Dict] = [
    {
        "id": "r1",
        "origin": "TWITTER",
        "text": "Urgent! Water entered first floor of Civil Hospital. Patients stranded. #AssamFloods",
        "media_url": "https://picsum.photos/400/300?grayscale",
        "minutes_ago": 0,
        "location": (20, 20, 24.83, 92.77),
        "location_name": "Silchar Civil Hospital",
        "category": "MEDICAL",
    },
    {
        "id": "r2",
        "origin": "WHATSAPP",
        "text": "Embankment breached near Sonai Road. Water rising fast. Need boats.",
        "media_url": "https://picsum.photos/400/301?blur=2",
        "minutes_ago": 15,
        "location": (70, 80, 24.60, 92.80),
        "location_name": "Sonai Road",
        "category": "INFRASTRUCTURE",
    },
    {
        "id": "r3",
        "origin": "TELEGRAM",
        "text": "Family stuck on roof in Karimganj. No food for 2 days. 5 people.",
        "media_url": None,
        "minutes_ago": 45,
        "location": (80, 25, 24.86, 92.35),
        "location_name": "Karimganj Town",
        "category": "FOOD_SHORTAGE",
    },
]

# Label stamped on a zone whenever inundation/status are recomputed
REFRESH_MARKER: str = "Just now"

# =============================================================================
# CONSENSUS WEIGHTS
# =============================================================================

# How much satellite inundation tells us about each incident category
CATEGORY_RELEVANCE: Dict[str, float] = {
    "FLOOD": 1.0,
    "LANDSLIDE": 0.8,
    "INFRASTRUCTURE": 0.8,
    "MEDICAL": 0.6,
    "FOOD_SHORTAGE": 0.5,
}

# Categories where rainfall directly corroborates the hazard
PRECIPITATION_SENSITIVE: Tuple[str, ...] = ("FLOOD", "LANDSLIDE", "INFRASTRUCTURE")

# Optical usefulness of imagery per cloud status (heavy cloud needs radar)
OPTICAL_WEIGHT: Dict[str, float] = {
    "CLEAR": 1.0,
    "PARTIAL_CLOUD": 0.6,
    "HEAVY_CLOUD": 0.0,
}

# Inundation term scale: 0.5 is neutral, 1.0 adds this / 2 points
INUNDATION_SCALE: float = 80.0

# Precipitation bonus saturates at this many mm
PRECIPITATION_SATURATION_MM: float = 20.0
PRECIPITATION_MAX_BONUS: float = 10.0

# Confidence contribution of a vision-agent severity label
SEVERITY_BONUS: Dict[str, int] = {
    "CRITICAL": 20,
    "HIGH": 15,
    "MEDIUM": 8,
    "LOW": 2,
}
DEPTH_BONUS: int = 5

# Narrative terms that corroborate a flood-type hazard
HAZARD_KEYWORDS: Tuple[str, ...] = (
    "water",
    "flood",
    "stranded",
    "submerged",
    "breach",
    "rising",
    "boat",
    "roof",
    "landslide",
    "collapsed",
)
KEYWORD_BONUS: int = 5

# =============================================================================
# API DEFAULTS
# =============================================================================

MIN_WINDOW_HOURS: int = 1
MAX_WINDOW_HOURS: int = 24

DEFAULT_RESOURCES: List[str] = [
    "NDRF Team (10 pax)",
    "Inflatable Boats (3)",
    "Drone Unit (1)",
    "Medical Kit (Type A)",
]
