"""
Visibility filter
Selects the incidents the map, heatmap and feed should currently show.
"""

from datetime import datetime, timedelta, timezone
from typing import Collection, Iterable, Iterator, Optional

from sentinelg.core.constants import MAX_WINDOW_HOURS, MIN_WINDOW_HOURS
from sentinelg.incidents.models import Incident, IncidentCategory, VerificationStatus


class VisibleIncidents:
    """
    Lazy, restartable view over a filtered incident sequence.

    Each iteration re-evaluates the filter against the source, preserving
    the source order.
    """

    def __init__(
        self,
        incidents: Iterable[Incident],
        now: datetime,
        window_hours: float,
        categories: Optional[Collection[IncidentCategory]] = None,
        verified_only: bool = False,
    ):
        # Materialize one-shot iterators so the view can be iterated again
        if iter(incidents) is incidents:
            incidents = list(incidents)
        self._source = incidents
        self.now = now
        self.window = timedelta(hours=window_hours)
        self.categories = frozenset(IncidentCategory(c) for c in (categories or ()))
        self.verified_only = verified_only

    def matches(self, incident: Incident) -> bool:
        if self.now - incident.created_at > self.window:
            return False
        if self.categories and incident.category not in self.categories:
            return False
        if self.verified_only and incident.status != VerificationStatus.VERIFIED_TRUE:
            return False
        return True

    def __iter__(self) -> Iterator[Incident]:
        return (incident for incident in self._source if self.matches(incident))


def visible(
    incidents: Iterable[Incident],
    now: Optional[datetime] = None,
    window_hours: float = MAX_WINDOW_HOURS,
    categories: Optional[Collection[IncidentCategory]] = None,
    verified_only: bool = False,
) -> VisibleIncidents:
    """
    Filter incidents for display.

    Keeps incidents no older than window_hours relative to now, in one of
    the given categories (all categories when none are given), and, with
    verified_only, only VERIFIED_TRUE incidents.

    Args:
        incidents: Source incidents, newest first
        now: Reference time (default: current UTC time)
        window_hours: Look-back window, 1 to 24 hours
        categories: Optional category whitelist
        verified_only: Keep only VERIFIED_TRUE incidents

    Returns:
        Restartable iterable of matching incidents in source order
    """
    if not MIN_WINDOW_HOURS <= window_hours <= MAX_WINDOW_HOURS:
        raise ValueError(
            f"window_hours must be between {MIN_WINDOW_HOURS} and {MAX_WINDOW_HOURS}, "
            f"got {window_hours}"
        )

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return VisibleIncidents(
        incidents,
        now=now,
        window_hours=window_hours,
        categories=categories,
        verified_only=verified_only,
    )
