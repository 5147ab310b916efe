"""
Sentinel-G - Error taxonomy

Engine errors signal structural misuse and always reach the caller.
SignalUnavailableError never leaves an adapter: it is converted to the
adapter's documented fallback value.
"""


class SentinelError(Exception):
    """Base class for all Sentinel-G errors."""


class NotFoundError(SentinelError, KeyError):
    """Unknown incident or zone identifier."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")

    def __str__(self) -> str:
        return f"{self.kind} not found: {self.identifier}"


class DuplicateIdError(SentinelError, ValueError):
    """An incident with the same identifier is already stored."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Incident already exists: {identifier}")


class DuplicateVoteError(SentinelError, ValueError):
    """The voter already voted on this incident."""

    def __init__(self, incident_id: str, voter_id: str):
        self.incident_id = incident_id
        self.voter_id = voter_id
        super().__init__(f"Voter {voter_id} already voted on incident {incident_id}")


class AlreadyInProgressError(SentinelError):
    """A verification pass is already running for this incident."""

    def __init__(self, incident_id: str):
        self.incident_id = incident_id
        super().__init__(f"Verification already in progress for incident {incident_id}")


class InvalidTransitionError(SentinelError):
    """The verification state machine does not allow this change."""

    def __init__(self, incident_id: str, current: str, target: str, reason: str = ""):
        self.incident_id = incident_id
        self.current = current
        self.target = target
        message = f"Incident {incident_id}: cannot move from {current} to {target}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ImmutableFieldError(SentinelError):
    """A mutation tried to rewrite a field fixed at ingestion."""

    def __init__(self, incident_id: str, field_name: str):
        self.incident_id = incident_id
        self.field_name = field_name
        super().__init__(f"Incident {incident_id}: field '{field_name}' is immutable")


class SignalUnavailableError(SentinelError):
    """An upstream signal (AI agent, weather, places) could not be obtained."""

    def __init__(self, source: str, detail: str = ""):
        self.source = source
        self.detail = detail
        super().__init__(f"{source} unavailable" + (f": {detail}" if detail else ""))
