"""
Cipherlands — participant-facing surface of the tile engine.

Every public operation runs as one serialized transition: a re-entrant lock
orders callers, state is snapshotted on entry and restored if anything
raises, and ledger-style events are delivered to subscribers only after the
transition commits. Events name identities and handles, never a plaintext
tile.
"""
import hashlib, json, logging, threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Optional

from tile_assignment import AssignmentEngine, ParticipantRecord, SeedSource, entropy_seed
from confidential_store import ZERO_HANDLE, ConfidentialPrimitive, ConfidentialValueStore
from decrypt_auth import DecryptAuthorization, check_identity
from tile_disclosure import DisclosureController, PublicRoster, PublicRosterEntry
from tile_errors import Outcome
from tile_occupancy import OccupancyTracker
from tile_settings import GridConfig

logger = logging.getLogger(__name__)

# -------- Event names --------
EVENT_JOINED = "joined"
EVENT_PUBLIC = "public"

Listener = Callable[[str, dict], None]


@dataclass(frozen=True)
class Receipt:
    record: ParticipantRecord
    outcome: Outcome

    @property
    def handle(self) -> str:
        return self.record.handle


class Cipherlands:
    def __init__(self, primitive: ConfidentialPrimitive, grid: GridConfig = None,
                 seed_source: SeedSource = entropy_seed):
        self.grid = grid or GridConfig.square()
        self.store = ConfidentialValueStore(primitive)
        self.occupancy = OccupancyTracker(self.grid)
        self.assignment = AssignmentEngine(self.occupancy, self.store, seed_source)
        self.disclosure = DisclosureController(self.assignment, self.store, PublicRoster())
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self._pending: list[tuple[str, dict]] = []

    # -------- transaction scope --------
    @contextmanager
    def _transaction(self):
        with self._lock:
            snap = (
                self.occupancy.snapshot(),
                self.assignment.snapshot(),
                self.disclosure.roster.snapshot(),
                self.store.snapshot(),
            )
            self._pending = []
            try:
                yield
            except Exception as exc:
                self.occupancy.restore(snap[0])
                self.assignment.restore(snap[1])
                self.disclosure.roster.restore(snap[2])
                self.store.restore(snap[3])
                self._pending = []
                logger.warning("transaction reverted: %s", exc)
                raise
            events, self._pending = self._pending, []
        for name, payload in events:
            for listener in list(self._listeners):
                try:
                    listener(name, payload)
                except Exception:
                    # the transition already committed; delivery never changes its result
                    logger.exception("listener failed on %s event", name)

    def _emit(self, name: str, **payload) -> None:
        self._pending.append((name, payload))

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # -------- mutating operations --------
    def join(self, identity: str) -> Receipt:
        check_identity(identity)
        with self._transaction():
            record, outcome = self.assignment.join(identity)
            if outcome is Outcome.ASSIGNED:
                self._emit(EVENT_JOINED, player=identity, handle=record.handle)
        return Receipt(record, outcome)

    def make_public(self, identity: str) -> Receipt:
        check_identity(identity)
        with self._transaction():
            record, outcome = self.disclosure.make_public(identity)
            if outcome is Outcome.DISCLOSED:
                self._emit(EVENT_PUBLIC, player=identity, handle=record.handle)
        return Receipt(record, outcome)

    # -------- decrypt paths --------
    def decrypt_own(self, identity: str, authorization: Optional[DecryptAuthorization]) -> int:
        with self._lock:
            return self.assignment.decrypt_own(identity, authorization)

    def decrypt_public(self, handle: str) -> int:
        with self._lock:
            return self.disclosure.decrypt_public(handle)

    # -------- read-only views --------
    @property
    def map_size(self) -> int:
        return self.grid.width

    @property
    def total_tiles(self) -> int:
        return self.grid.total_cells

    @property
    def player_count(self) -> int:
        return len(self.assignment.records)

    def has_joined(self, identity: str) -> bool:
        return self.assignment.record_of(identity) is not None

    def is_public(self, identity: str) -> bool:
        return self.disclosure.is_public(identity)

    def get_own_confidential_handle(self, identity: str) -> str:
        record = self.assignment.record_of(identity)
        return record.handle if record else ZERO_HANDLE

    def is_occupied(self, cell: int) -> bool:
        return self.occupancy.is_occupied(cell)

    def occupied_cells(self) -> list[int]:
        return self.occupancy.occupied_cells()

    def list_public(self) -> tuple[PublicRosterEntry, ...]:
        return self.disclosure.list_public()

    def public_players(self) -> list[str]:
        return self.disclosure.public_players()

    def public_state(self) -> dict:
        with self._lock:
            return {
                "map_size": self.map_size,
                "total_tiles": self.total_tiles,
                "players": self.player_count,
                "occupancy": self.occupancy.bitmap().hex(),
                "public": [[e.identity, e.handle] for e in self.list_public()],
            }

    def state_digest(self) -> str:
        blob = json.dumps(self.public_state(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(blob.encode("utf-8")).hexdigest()
