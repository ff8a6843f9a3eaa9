# armory_api/services/soldiers.py
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from armory_api import db
from armory_api.errors import NotFoundError
from armory_api.models.armory_item import ArmoryItem
from armory_api.models.soldier import Soldier
from armory_api.services import ledger
from armory_api.services.documents import delete_blob_best_effort
from armory_api.services.versioned import run_versioned
from armory_api.storage import LocalBlobStorage

logger = logging.getLogger(__name__)


def delete_soldier(storage: LocalBlobStorage, soldier_id: str) -> dict:
    """
    Delete a soldier and release everything they hold.

    Document blobs go first, best-effort. Then, in one transaction, unique
    items linked to the soldier are unlinked (they stay in inventory), the
    soldier's share is dropped from every quantity ledger, and the soldier
    row is removed together with its document rows.
    """
    with db.SessionLocal() as s:
        soldier = s.get(Soldier, soldier_id)
        if soldier is None:
            raise NotFoundError(f"Soldier {soldier_id} not found")
        keys = [d.storage_path for d in soldier.documents]

    for key in keys:
        delete_blob_best_effort(storage, key)

    def _apply(s: Session) -> dict:
        soldier = s.get(Soldier, soldier_id)
        if soldier is None:
            raise NotFoundError(f"Soldier {soldier_id} not found")

        unlinked = []
        linked_items = s.execute(
            select(ArmoryItem).where(ArmoryItem.linked_soldier_id == soldier_id)
        ).scalars().all()
        for item in linked_items:
            item.linked_soldier_id = None
            unlinked.append(item.id)

        released = {}
        quantity_items = s.execute(
            select(ArmoryItem).where(ArmoryItem.is_unique_item.is_(False))
        ).scalars().all()
        for item in quantity_items:
            remaining, qty = ledger.remove_soldier(item.assignments, soldier_id)
            if qty:
                item.assignments = remaining
                released[item.id] = qty

        # item rows must stop pointing at the soldier before the soldier row goes
        s.flush()
        s.delete(soldier)
        s.flush()
        return {"unlinked_items": unlinked, "released": released}

    summary = run_versioned(_apply, what="delete_soldier")
    logger.info(
        f"[soldiers] deleted soldier {soldier_id}: unlinked {summary['unlinked_items']}, "
        f"released {summary['released']}"
    )
    return summary
