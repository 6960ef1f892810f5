# contracts/tile_disclosure.py
# One-way disclosure + the append-only public roster
import logging
from dataclasses import dataclass, replace

from tile_assignment import AssignmentEngine, ParticipantRecord
from confidential_store import ConfidentialValueStore
from tile_errors import NotJoined, Outcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicRosterEntry:
    identity: str
    handle: str


class PublicRoster:
    def __init__(self):
        self._entries: list[PublicRosterEntry] = []
        self._members: set[str] = set()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identity: str) -> bool:
        return identity in self._members

    def append(self, entry: PublicRosterEntry) -> None:
        if entry.identity in self._members:
            return
        self._entries.append(entry)
        self._members.add(entry.identity)

    def entries(self) -> tuple[PublicRosterEntry, ...]:
        return tuple(self._entries)

    def snapshot(self) -> list:
        return list(self._entries)

    def restore(self, entries: list) -> None:
        self._entries = list(entries)
        self._members = {e.identity for e in self._entries}


class DisclosureController:
    def __init__(self, assignment: AssignmentEngine, store: ConfidentialValueStore, roster: PublicRoster = None):
        self.assignment = assignment
        self.store = store
        self.roster = roster if roster is not None else PublicRoster()

    def make_public(self, identity: str) -> tuple[ParticipantRecord, Outcome]:
        record = self.assignment.record_of(identity)
        if record is None or not record.joined:
            raise NotJoined(f"{identity} must join before disclosing")
        if record.public:
            return record, Outcome.ALREADY_PUBLIC

        value, _ = self.store.grant_public(record.confidential_value)
        record = replace(record, confidential_value=value, public=True)
        self.assignment.records[identity] = record
        self.roster.append(PublicRosterEntry(identity, value.handle))
        logger.info("%s disclosed; %d public", identity, len(self.roster))
        return record, Outcome.DISCLOSED

    def is_public(self, identity: str) -> bool:
        return identity in self.roster

    def list_public(self) -> tuple[PublicRosterEntry, ...]:
        return self.roster.entries()

    def public_players(self) -> list[str]:
        return [e.identity for e in self.roster.entries()]

    def decrypt_public(self, handle: str) -> int:
        return self.store.decrypt_public(handle)
