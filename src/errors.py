"""Error types raised by the family graph engine."""


class FamilyGraphError(Exception):
    """Base class for every failure the engine reports."""


class InvariantViolation(FamilyGraphError, ValueError):
    """A mutation would break a graph invariant; the graph is left unchanged."""


class AlreadyMarriedError(InvariantViolation):
    pass


class TooManyParentsError(InvariantViolation):
    pass


class UnsupportedRelationshipError(InvariantViolation):
    pass


class PersonNotFoundError(FamilyGraphError, LookupError):
    def __init__(self, ref: str, role: str = "person"):
        super().__init__(f"{role} not found: {ref}")
        self.ref = ref
        self.role = role
