"""Exceptions raised by the planning engine."""


class PlanningError(Exception):
    """Base class for every planning failure."""

    pass


class ConfigurationError(PlanningError):
    """Raised when cycle, equipment or settings data cannot support planning."""

    pass


class InvalidReferenceError(PlanningError):
    """Raised when a calibration, exercise or equipment id cannot be resolved."""

    def __init__(self, kind: str, ref_id: str, owner: str | None = None):
        self.kind = kind
        self.ref_id = ref_id
        self.owner = owner
        where = f" (referenced by {owner})" if owner else ""
        super().__init__(f"Unknown {kind} '{ref_id}'{where}")


class PlanStateError(PlanningError):
    """Raised when existing plan records are in a state that blocks an update."""

    pass
