# contracts/tile_assignment.py
# Join: seeded start + linear probing over plaintext occupancy, then wrap the cell
import hashlib, logging, secrets
from dataclasses import dataclass
from typing import Callable, Optional

from confidential_store import ConfidentialValue, ConfidentialValueStore
from decrypt_auth import DecryptAuthorization
from tile_errors import GridFull, InvariantViolation, NotJoined, Outcome
from tile_occupancy import OccupancyTracker

logger = logging.getLogger(__name__)

# (identity, join ordinal) -> seed integer
SeedSource = Callable[[str, int], int]


def entropy_seed(identity: str, ordinal: int) -> int:
    """Fresh platform entropy mixed with the joiner and the join ordinal."""
    material = secrets.token_bytes(32) + identity.encode("utf-8") + ordinal.to_bytes(8, "big")
    return int.from_bytes(hashlib.sha256(material).digest(), "big")


def digest_seed(beacon: bytes) -> SeedSource:
    """Deterministic seed from an external randomness beacon value."""
    def seed(identity: str, ordinal: int) -> int:
        material = beacon + identity.encode("utf-8") + ordinal.to_bytes(8, "big")
        return int.from_bytes(hashlib.sha256(material).digest(), "big")
    return seed


@dataclass(frozen=True)
class ParticipantRecord:
    identity: str
    confidential_value: ConfidentialValue
    joined: bool = True
    public: bool = False

    @property
    def handle(self) -> str:
        return self.confidential_value.handle


class AssignmentEngine:
    def __init__(self, occupancy: OccupancyTracker, store: ConfidentialValueStore,
                 seed_source: SeedSource = entropy_seed):
        self.occupancy = occupancy
        self.store = store
        self.seed_source = seed_source
        self.records: dict[str, ParticipantRecord] = {}

    def record_of(self, identity: str) -> Optional[ParticipantRecord]:
        return self.records.get(identity)

    def select_cell(self, identity: str) -> int:
        total = self.occupancy.grid.total_cells
        candidate = self.seed_source(identity, len(self.records)) % total + 1
        for _ in range(total):
            if not self.occupancy.is_occupied(candidate):
                return candidate
            candidate = candidate % total + 1
        # capacity was checked by the caller; reaching here means the count is wrong
        raise InvariantViolation(f"no free cell after {total} probes with {self.occupancy.capacity_remaining()} remaining")

    def join(self, identity: str) -> tuple[ParticipantRecord, Outcome]:
        existing = self.records.get(identity)
        if existing is not None:
            return existing, Outcome.ALREADY_JOINED
        if self.occupancy.capacity_remaining() == 0:
            raise GridFull(f"all {self.occupancy.grid.total_cells} tiles are taken")

        cell = self.select_cell(identity)
        self.occupancy.occupy(cell)
        value = self.store.wrap(cell, identity)
        record = ParticipantRecord(identity, value)
        self.records[identity] = record
        logger.info("%s joined; %d tiles remaining", identity, self.occupancy.capacity_remaining())
        return record, Outcome.ASSIGNED

    def decrypt_own(self, identity: str, authorization: Optional[DecryptAuthorization]) -> int:
        record = self.records.get(identity)
        if record is None:
            raise NotJoined(f"{identity} has not joined")
        return self.store.decrypt(record.confidential_value, identity, authorization)

    def snapshot(self) -> dict:
        return dict(self.records)

    def restore(self, records: dict) -> None:
        self.records = dict(records)
