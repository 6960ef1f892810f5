# contracts/tile_errors.py
# Failure taxonomy + idempotency outcomes for the tile engine
from enum import Enum


class CipherlandsError(Exception):
    """Base class for every failure the engine surfaces."""


class InvariantViolation(CipherlandsError):
    """State is inconsistent; the enclosing transaction must abort."""


class OutOfRange(InvariantViolation):
    pass


class AlreadyOccupied(InvariantViolation):
    pass


class GridFull(CipherlandsError):
    """Every cell is taken. Expected end state, not a fault."""


class NotJoined(CipherlandsError):
    pass


class NotAuthorized(CipherlandsError):
    pass


class InvalidIdentity(CipherlandsError):
    pass


class PrimitiveError(CipherlandsError):
    """The confidential-computation backend failed or was unreachable."""


class Outcome(str, Enum):
    # success outcomes; the ALREADY_* members are idempotency signals, not failures
    ASSIGNED = "assigned"
    ALREADY_JOINED = "already_joined"
    DISCLOSED = "disclosed"
    ALREADY_PUBLIC = "already_public"

