import threading

import pytest

from armory_api.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    NotQuantityItemError,
)
from armory_api.db import SessionLocal
from armory_api.models import Soldier
from armory_api.services import assignments, ledger
from armory_api.services.soldiers import delete_soldier
from armory_api.services.versioned import MAX_ATTEMPTS


def _ledger(load_item, item_id):
    return {a["soldier_id"]: a["quantity"] for a in load_item(item_id).assignments}


def test_headroom_rejection_through_api(client, seed, load_item):
    for sid in ("A", "B", "C"):
        seed.soldier(sid)
    item_id = seed.quantity_item(10, [{"soldier_id": "A", "quantity": 4}, {"soldier_id": "B", "quantity": 3}])

    r = client.put(f"/armory/items/{item_id}/assignments/C", json={"quantity": 4})
    assert r.status_code == 409
    body = r.json()
    assert body["error"] == "insufficient_stock"
    assert body["headroom"] == 3

    r = client.put(f"/armory/items/{item_id}/assignments/C", json={"quantity": 3})
    assert r.status_code == 200
    assert r.json()["available_quantity"] == 0
    assert _ledger(load_item, item_id) == {"A": 4, "B": 3, "C": 3}


def test_zero_quantity_unassigns(client, seed, load_item):
    seed.soldier("A")
    item_id = seed.quantity_item(10, [{"soldier_id": "A", "quantity": 4}])

    r = client.put(f"/armory/items/{item_id}/assignments/A", json={"quantity": 0})
    assert r.status_code == 200
    assert r.json()["assignments"] == []
    assert load_item(item_id).assignments == []


def test_negative_quantity_is_a_validation_error(client, seed):
    seed.soldier("A")
    item_id = seed.quantity_item(10)
    r = client.put(f"/armory/items/{item_id}/assignments/A", json={"quantity": -2})
    assert r.status_code == 422


def test_repeating_an_assignment_changes_nothing(seed, load_item):
    seed.soldier("A")
    item_id = seed.quantity_item(10)

    assignments.set_assignment(item_id, "A", 5)
    first = load_item(item_id)
    assignments.set_assignment(item_id, "A", 5)
    second = load_item(item_id)

    assert first.assignments == second.assignments == [{"soldier_id": "A", "quantity": 5}]
    # an unchanged ledger is not rewritten
    assert second.version_id == first.version_id


def test_partial_reassignment(seed, load_item):
    seed.soldier("A")
    seed.soldier("B")
    item_id = seed.quantity_item(10, [{"soldier_id": "A", "quantity": 8}])

    assignments.set_assignment(item_id, "A", 3)
    assignments.set_assignment(item_id, "B", 7)
    assert _ledger(load_item, item_id) == {"A": 3, "B": 7}


def test_missing_item_and_soldier(seed):
    seed.soldier("A")
    item_id = seed.quantity_item(10)
    with pytest.raises(NotFoundError):
        assignments.set_assignment(9999, "A", 1)
    with pytest.raises(NotFoundError):
        assignments.set_assignment(item_id, "ghost", 1)


def test_unique_item_has_no_ledger(client, seed):
    seed.soldier("A")
    item_id = seed.unique_item("SN-1")
    with pytest.raises(NotQuantityItemError):
        assignments.set_assignment(item_id, "A", 1)

    r = client.put(f"/armory/items/{item_id}/assignments/A", json={"quantity": 1})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid"


def _race_once(monkeypatch, competing):
    """Let ``competing`` commit between the manager's read and its write, once."""
    original = assignments._load_item
    state = {"raced": False}

    def racing_load(s, item_id):
        item = original(s, item_id)
        if not state["raced"]:
            state["raced"] = True
            competing(item_id)
        return item

    monkeypatch.setattr(assignments, "_load_item", racing_load)


def test_race_that_would_overallocate_is_rejected(monkeypatch, seed, load_item):
    seed.soldier("A")
    seed.soldier("B")
    item_id = seed.quantity_item(10)

    _race_once(monkeypatch, lambda iid: assignments.set_assignment(iid, "B", 6))

    # A read the empty ledger, but B's 6 units were committed first
    with pytest.raises(InsufficientStockError) as exc:
        assignments.set_assignment(item_id, "A", 6)
    assert exc.value.headroom == 4
    assert _ledger(load_item, item_id) == {"B": 6}


def test_race_within_stock_keeps_both_writes(monkeypatch, seed, load_item):
    seed.soldier("A")
    seed.soldier("B")
    item_id = seed.quantity_item(10)

    _race_once(monkeypatch, lambda iid: assignments.set_assignment(iid, "B", 5))

    assignments.set_assignment(item_id, "A", 4)
    assert _ledger(load_item, item_id) == {"B": 5, "A": 4}


def test_conflict_after_repeated_races(monkeypatch, seed, load_item):
    seed.soldier("A")
    seed.soldier("B")
    item_id = seed.quantity_item(10)

    original = assignments._load_item
    calls = {"n": 0}

    def always_racing(s, iid):
        item = original(s, iid)
        calls["n"] += 1
        if calls["n"] % 2 == 1:
            # odd calls are the manager's own reads; alternate B so every write bumps the version
            assignments.set_assignment(iid, "B", 1 + (calls["n"] // 2) % 2)
        return item

    monkeypatch.setattr(assignments, "_load_item", always_racing)

    with pytest.raises(ConflictError):
        assignments.set_assignment(item_id, "A", 1)
    assert "A" not in _ledger(load_item, item_id)
    assert calls["n"] == MAX_ATTEMPTS * 2


def test_total_quantity_cannot_drop_below_assigned(client, seed, load_item):
    seed.soldier("A")
    item_id = seed.quantity_item(10, [{"soldier_id": "A", "quantity": 6}])

    r = client.patch(f"/armory/items/{item_id}", json={"total_quantity": 5})
    assert r.status_code == 400
    assert r.json()["assigned"] == 6

    r = client.patch(f"/armory/items/{item_id}", json={"total_quantity": 6})
    assert r.status_code == 200
    assert r.json()["available_quantity"] == 0
    assert load_item(item_id).total_quantity == 6


def test_ledger_listing_includes_soldier_names(client, seed):
    division_id = seed.division("Bravo")
    seed.soldier("A", name="Dana", division_id=division_id)
    item_id = seed.quantity_item(10, [{"soldier_id": "A", "quantity": 2}])

    r = client.get(f"/armory/items/{item_id}/assignments")
    assert r.status_code == 200
    body = r.json()
    assert body["available_quantity"] == 8
    assert body["assignments"] == [
        {"soldier_id": "A", "quantity": 2, "soldier_name": "Dana", "soldier_division_name": "Bravo"}
    ]


def _soldier_exists(soldier_id):
    with SessionLocal() as s:
        return s.get(Soldier, soldier_id) is not None


def test_soldier_deleted_mid_assignment_is_not_left_holding_stock(monkeypatch, seed, storage, load_item):
    seed.soldier("A")
    item_id = seed.quantity_item(10)

    original = ledger.apply_assignment
    state = {"deleted": False}

    def delete_then_apply(*args):
        if not state["deleted"]:
            state["deleted"] = True
            delete_soldier(storage, "A")
        return original(*args)

    monkeypatch.setattr(ledger, "apply_assignment", delete_then_apply)

    with pytest.raises(NotFoundError):
        assignments.set_assignment(item_id, "A", 5)
    assert not _soldier_exists("A")
    assert load_item(item_id).assignments == []


def test_assignment_committed_mid_delete_is_released(monkeypatch, seed, storage, load_item):
    seed.soldier("A")
    item_id = seed.quantity_item(10)

    original = ledger.remove_soldier
    state = {"assigned": False}

    def assign_then_remove(entries, soldier_id):
        if not state["assigned"]:
            state["assigned"] = True
            assignments.set_assignment(item_id, "A", 5)
        return original(entries, soldier_id)

    monkeypatch.setattr(ledger, "remove_soldier", assign_then_remove)

    summary = delete_soldier(storage, "A")
    assert summary["released"] == {item_id: 5}
    assert not _soldier_exists("A")
    assert load_item(item_id).assignments == []


def test_patch_of_quantity_item_is_one_write(client, seed, load_item):
    item_id = seed.quantity_item(10)
    before = load_item(item_id).version_id

    r = client.patch(f"/armory/items/{item_id}", json={"total_quantity": 12, "image_url": "/img/mag.png"})
    assert r.status_code == 200
    after = load_item(item_id)
    assert (after.total_quantity, after.image_url) == (12, "/img/mag.png")
    assert after.version_id == before + 1


def test_rejected_total_leaves_the_rest_of_the_patch_unapplied(client, seed, load_item):
    seed.soldier("A")
    item_id = seed.quantity_item(10, [{"soldier_id": "A", "quantity": 6}])

    r = client.patch(f"/armory/items/{item_id}", json={"total_quantity": 2, "image_url": "/img/new.png"})
    assert r.status_code == 400
    item = load_item(item_id)
    assert (item.total_quantity, item.image_url) == (10, None)

    assignments.set_total_quantity(item_id, 7)
    assert load_item(item_id).total_quantity == 7


def test_threads_racing_for_the_same_stock_never_overallocate(seed, load_item):
    soldier_ids = [f"S{i}" for i in range(8)]
    for sid in soldier_ids:
        seed.soldier(sid)
    item_id = seed.quantity_item(10)

    barrier = threading.Barrier(len(soldier_ids))
    outcomes = {}

    def worker(sid):
        barrier.wait()
        try:
            assignments.set_assignment(item_id, sid, 3)
            outcomes[sid] = "assigned"
        except (InsufficientStockError, ConflictError) as e:
            outcomes[sid] = type(e).__name__

    threads = [threading.Thread(target=worker, args=(sid,)) for sid in soldier_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    held = _ledger(load_item, item_id)
    assert len(outcomes) == len(soldier_ids)
    assert held
    assert sum(held.values()) <= 10
    assert set(held) == {sid for sid, outcome in outcomes.items() if outcome == "assigned"}
    assert all(q == 3 for q in held.values())
