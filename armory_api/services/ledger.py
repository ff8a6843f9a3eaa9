# armory_api/services/ledger.py
"""
Bookkeeping for quantity (non-unique) armory items.

A ledger is the list of ``{"soldier_id": str, "quantity": int}`` entries
stored on the item row. Nothing here touches the database: every helper
takes the current list and returns a value or a *new* list.

Invariants of a well-formed ledger:
  * at most one entry per soldier,
  * every quantity is > 0,
  * sum(quantity) <= total_quantity.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from armory_api.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    LedgerIntegrityError,
)

Ledger = List[dict]


def total_assigned(assignments: Optional[Sequence[dict]]) -> int:
    return sum(int(a["quantity"]) for a in (assignments or []))


def assigned_quantity_for(assignments: Optional[Sequence[dict]], soldier_id: str) -> int:
    for a in assignments or []:
        if a["soldier_id"] == soldier_id:
            return int(a["quantity"])
    return 0


def headroom(total_quantity: int, assignments: Optional[Sequence[dict]], soldier_id: str) -> int:
    """Stock left for ``soldier_id`` once everybody else's share is taken out."""
    others = sum(int(a["quantity"]) for a in (assignments or []) if a["soldier_id"] != soldier_id)
    return (total_quantity or 0) - others


def available_quantity(total_quantity: int, assignments: Optional[Sequence[dict]]) -> int:
    available = (total_quantity or 0) - total_assigned(assignments)
    if available < 0:
        # Over-allocation can only come from a bad write; report it instead of hiding it
        raise LedgerIntegrityError(
            f"Ledger assigns {total_assigned(assignments)} units but total stock is {total_quantity}",
            total_quantity=total_quantity,
            assigned=total_assigned(assignments),
        )
    return available


def apply_assignment(
    total_quantity: int,
    assignments: Optional[Sequence[dict]],
    soldier_id: str,
    new_quantity: int,
) -> Ledger:
    """
    Return the ledger with ``soldier_id`` holding exactly ``new_quantity`` units.

    0 removes the soldier's entry, a new soldier is appended, an existing
    entry keeps its position and gets the new quantity.
    """
    if new_quantity < 0:
        raise InvalidQuantityError("Quantity must be zero or positive", quantity=new_quantity)

    room = headroom(total_quantity, assignments, soldier_id)
    if new_quantity > room:
        raise InsufficientStockError(requested=new_quantity, headroom=max(room, 0))

    out: Ledger = []
    found = False
    for a in assignments or []:
        if a["soldier_id"] == soldier_id:
            found = True
            if new_quantity > 0:
                out.append({"soldier_id": soldier_id, "quantity": new_quantity})
            continue
        out.append({"soldier_id": a["soldier_id"], "quantity": int(a["quantity"])})

    if not found and new_quantity > 0:
        out.append({"soldier_id": soldier_id, "quantity": new_quantity})
    return out


def remove_soldier(assignments: Optional[Sequence[dict]], soldier_id: str) -> Tuple[Ledger, int]:
    """Drop a soldier's entry; returns the new ledger and the released quantity."""
    kept = [dict(a) for a in (assignments or []) if a["soldier_id"] != soldier_id]
    return kept, assigned_quantity_for(assignments, soldier_id)


def validate_ledger(total_quantity: int, assignments: Iterable[dict]) -> Ledger:
    """Build a ledger from scratch, entry by entry, enforcing every invariant."""
    ledger: Ledger = []
    seen = set()
    for a in assignments:
        sid = a["soldier_id"]
        if sid in seen:
            raise InvalidQuantityError(f"Soldier {sid} appears twice in the assignment list", soldier_id=sid)
        seen.add(sid)
        ledger = apply_assignment(total_quantity, ledger, sid, int(a["quantity"]))
    return ledger


def items_assignable_to(items: Iterable, soldier_id: str) -> list:
    """
    Quantity items the soldier can be given more of, or already holds.

    Items fully allocated to other soldiers are left out; an item the soldier
    holds part of stays in so the allocation can still be edited.
    """
    out = []
    for item in items:
        if item.is_unique_item:
            continue
        if (
            available_quantity(item.total_quantity, item.assignments) > 0
            or assigned_quantity_for(item.assignments, soldier_id) > 0
        ):
            out.append(item)
    return out
