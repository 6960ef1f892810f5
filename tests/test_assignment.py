import pytest
from algosdk import account

from tile_assignment import AssignmentEngine, digest_seed, entropy_seed
from confidential_store import ConfidentialValueStore, OwnerOnly
from decrypt_auth import authorize
from tile_errors import GridFull, NotAuthorized, NotJoined, Outcome
from tile_occupancy import OccupancyTracker
from paillier_coprocessor import PaillierCoprocessor
from tile_settings import GridConfig


def _engine(size=2, seed=lambda identity, ordinal: 0):
    occ = OccupancyTracker(GridConfig.square(size))
    store = ConfidentialValueStore(PaillierCoprocessor(n_length=512))
    return AssignmentEngine(occ, store, seed)


def _cell(engine, sk, record):
    return engine.decrypt_own(record.identity, authorize(sk, [record.handle]))


def test_join_assigns_owner_only_value():
    engine = _engine()
    sk, addr = account.generate_account()
    record, outcome = engine.join(addr)
    assert outcome is Outcome.ASSIGNED
    assert record.joined and not record.public
    assert record.confidential_value.grant == OwnerOnly(addr)
    assert _cell(engine, sk, record) == 1
    assert engine.occupancy.is_occupied(1)


def test_linear_probing_wraps_around():
    # every join starts at cell 4, the last one
    engine = _engine(seed=lambda identity, ordinal: 3)
    keys = [account.generate_account() for _ in range(4)]
    cells = [_cell(engine, sk, engine.join(addr)[0]) for sk, addr in keys]
    assert cells == [4, 1, 2, 3]


def test_rejoin_keeps_cell():
    engine = _engine(seed=lambda identity, ordinal: ordinal)
    sk, addr = account.generate_account()
    first, _ = engine.join(addr)
    again, outcome = engine.join(addr)
    assert outcome is Outcome.ALREADY_JOINED
    assert again is first
    assert engine.occupancy.occupied_count == 1


def test_grid_full_leaves_no_trace():
    engine = _engine(size=1)
    engine.join(account.generate_account()[1])
    _, late = account.generate_account()
    with pytest.raises(GridFull):
        engine.join(late)
    assert engine.record_of(late) is None
    assert engine.occupancy.occupied_count == 1


def test_decrypt_own_only_for_owner():
    engine = _engine()
    sk_a, a = account.generate_account()
    sk_b, b = account.generate_account()
    rec_a, _ = engine.join(a)
    engine.join(b)
    with pytest.raises(NotAuthorized):
        engine.store.decrypt(rec_a.confidential_value, b, authorize(sk_b, [rec_a.handle]))
    with pytest.raises(NotJoined):
        engine.decrypt_own(account.generate_account()[1], None)


def test_seed_sources():
    _, addr = account.generate_account()
    seed = digest_seed(b"beacon-round-42")
    assert seed(addr, 0) == seed(addr, 0)
    assert seed(addr, 0) != seed(addr, 1)
    assert entropy_seed(addr, 0) != entropy_seed(addr, 0)
