"""
Incident store
In-memory, newest-first collection of incidents for the current session.
"""

import copy
import logging
import threading
from typing import Any, Callable, Dict, Iterator, List

from sentinelg.core.exceptions import DuplicateIdError, ImmutableFieldError, NotFoundError
from sentinelg.incidents.models import IMMUTABLE_FIELDS, Incident, VerificationStatus

logger = logging.getLogger(__name__)

Mutator = Callable[[Incident], None]


class IncidentStore:
    """
    Holds incidents for the lifetime of a session.

    Readers only ever receive copies. Writers go through append() or
    update(); update() runs the mutator against a private working copy and
    swaps it in only if the mutator returns normally, so a failing mutation
    leaves the stored record untouched.
    """

    def __init__(self):
        self._incidents: Dict[str, Incident] = {}
        self._order: List[str] = []
        self._index_lock = threading.Lock()
        self._record_locks: Dict[str, threading.Lock] = {}

        logger.info("IncidentStore initialized")

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, incident_id: object) -> bool:
        return incident_id in self._incidents

    def append(self, incident: Incident) -> Incident:
        """
        Add an incident to the front of the ordering.

        Raises:
            DuplicateIdError: if the identifier is already stored
        """
        with self._index_lock:
            if incident.id in self._incidents:
                raise DuplicateIdError(incident.id)

            stored = copy.deepcopy(incident)
            self._incidents[stored.id] = stored
            self._order.insert(0, stored.id)
            self._record_locks[stored.id] = threading.Lock()

        logger.info(
            f"Incident appended: {stored.id} ({stored.category.value}) "
            f"from {stored.origin.value} at {stored.location_name}"
        )
        return copy.deepcopy(stored)

    def get(self, incident_id: str) -> Incident:
        """
        Get a snapshot of an incident.

        Raises:
            NotFoundError: if the identifier is unknown
        """
        incident = self._incidents.get(incident_id)
        if incident is None:
            raise NotFoundError("Incident", incident_id)
        return copy.deepcopy(incident)

    def all(self) -> List[Incident]:
        """Snapshots of every incident, newest first."""
        with self._index_lock:
            order = list(self._order)
        return [copy.deepcopy(self._incidents[i]) for i in order]

    def __iter__(self) -> Iterator[Incident]:
        return iter(self.all())

    def update(self, incident_id: str, mutator: Mutator) -> Incident:
        """
        Apply an all-or-nothing mutation to one incident.

        Args:
            incident_id: Incident to mutate
            mutator: Callable receiving a working copy to modify in place

        Returns:
            Snapshot of the updated incident

        Raises:
            NotFoundError: if the identifier is unknown
            ImmutableFieldError: if the mutator changed a field fixed at ingestion
            Any exception raised by the mutator (the stored record is unchanged)
        """
        lock = self._record_locks.get(incident_id)
        if lock is None:
            raise NotFoundError("Incident", incident_id)

        with lock:
            current = self._incidents[incident_id]
            working = copy.deepcopy(current)
            mutator(working)

            for name in IMMUTABLE_FIELDS:
                if getattr(working, name) != getattr(current, name):
                    raise ImmutableFieldError(incident_id, name)

            self._incidents[incident_id] = working
            return copy.deepcopy(working)

    def get_statistics(self) -> Dict[str, Any]:
        """Get incident statistics."""
        incidents = list(self._incidents.values())
        total = len(incidents)

        by_status: Dict[str, int] = {}
        by_category: Dict[str, int] = {}
        with_media = 0
        verified = 0

        for incident in incidents:
            status = incident.status.value
            by_status[status] = by_status.get(status, 0) + 1

            category = incident.category.value
            by_category[category] = by_category.get(category, 0) + 1

            if incident.media_url:
                with_media += 1

            if incident.status == VerificationStatus.VERIFIED_TRUE:
                verified += 1

        return {
            "total_incidents": total,
            "by_status": by_status,
            "by_category": by_category,
            "with_media": with_media,
            "verification_rate": verified / total if total > 0 else 0,
        }
