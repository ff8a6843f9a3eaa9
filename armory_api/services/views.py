# armory_api/services/views.py
"""
Read-only views over armory items and soldiers.

Display names (item type, soldier, division) are looked up from the
referenced ids on every call; nothing here writes.
"""
from __future__ import annotations

from typing import Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from armory_api.models.armory_item import ArmoryItem
from armory_api.models.soldier import Soldier
from armory_api.services import ledger


def soldiers_by_id(s: Session, ids: Iterable[str]) -> Dict[str, Soldier]:
    ids = {i for i in ids if i}
    if not ids:
        return {}
    rows = s.execute(
        select(Soldier).options(selectinload(Soldier.division)).where(Soldier.id.in_(ids))
    ).scalars().all()
    return {x.id: x for x in rows}


def _referenced_soldiers(items: Iterable[ArmoryItem]) -> set:
    ids = set()
    for item in items:
        if item.linked_soldier_id:
            ids.add(item.linked_soldier_id)
        for a in item.assignments or []:
            ids.add(a["soldier_id"])
    return ids


def serialize_item(item: ArmoryItem, soldiers: Dict[str, Soldier]) -> dict:
    out = {
        "id": item.id,
        "item_type_id": item.item_type_id,
        "item_type_name": item.item_type_name,
        "is_unique_item": item.is_unique_item,
        "image_url": item.image_url,
        "item_id": None,
        "linked_soldier_id": None,
        "linked_soldier_name": None,
        "linked_soldier_division_name": None,
        "total_quantity": None,
        "available_quantity": None,
        "assignments": [],
    }
    if item.is_unique_item:
        linked = soldiers.get(item.linked_soldier_id) if item.linked_soldier_id else None
        out.update({
            "item_id": item.item_id,
            "linked_soldier_id": item.linked_soldier_id,
            "linked_soldier_name": linked.name if linked else None,
            "linked_soldier_division_name": linked.division_name if linked else None,
        })
        return out

    rows = []
    for a in item.assignments or []:
        who = soldiers.get(a["soldier_id"])
        rows.append({
            "soldier_id": a["soldier_id"],
            "quantity": a["quantity"],
            "soldier_name": who.name if who else None,
            "soldier_division_name": who.division_name if who else None,
        })
    out.update({
        "total_quantity": item.total_quantity,
        "available_quantity": ledger.available_quantity(item.total_quantity, item.assignments),
        "assignments": rows,
    })
    return out


def serialize_items(s: Session, items: List[ArmoryItem]) -> List[dict]:
    soldiers = soldiers_by_id(s, _referenced_soldiers(items))
    return [serialize_item(i, soldiers) for i in items]


def quantity_items(s: Session) -> List[ArmoryItem]:
    return list(
        s.execute(
            select(ArmoryItem).where(ArmoryItem.is_unique_item.is_(False)).order_by(ArmoryItem.id)
        ).scalars().all()
    )


def assigned_unique_items(s: Session, soldier_id: str) -> List[dict]:
    rows = s.execute(
        select(ArmoryItem)
        .where(ArmoryItem.linked_soldier_id == soldier_id)
        .order_by(ArmoryItem.id)
    ).scalars().all()
    return [{"id": i.id, "item_type_name": i.item_type_name, "item_id": i.item_id} for i in rows]


def assigned_quantity_items(s: Session, soldier_id: str) -> List[dict]:
    out = []
    for item in quantity_items(s):
        qty = ledger.assigned_quantity_for(item.assignments, soldier_id)
        if qty > 0:
            out.append({"id": item.id, "item_type_name": item.item_type_name, "quantity": qty})
    return out


def assignable_items(s: Session, soldier_id: str) -> List[dict]:
    items = ledger.items_assignable_to(quantity_items(s), soldier_id)
    out = []
    for item in items:
        out.append({
            "id": item.id,
            "item_type_id": item.item_type_id,
            "item_type_name": item.item_type_name,
            "total_quantity": item.total_quantity,
            "available_quantity": ledger.available_quantity(item.total_quantity, item.assignments),
            "assigned_to_soldier": ledger.assigned_quantity_for(item.assignments, soldier_id),
        })
    return out


def division_armory_count(s: Session, soldier_ids: Iterable[str]) -> int:
    """Unique items linked to these soldiers plus quantity units assigned to them."""
    ids = set(soldier_ids)
    if not ids:
        return 0
    count = len(
        s.execute(select(ArmoryItem.id).where(ArmoryItem.linked_soldier_id.in_(ids))).all()
    )
    for item in quantity_items(s):
        count += sum(int(a["quantity"]) for a in (item.assignments or []) if a["soldier_id"] in ids)
    return count


def serialize_document(d) -> dict:
    return {
        "id": d.id,
        "file_name": d.file_name,
        "storage_path": d.storage_path,
        "download_url": d.download_url,
        "file_type": d.file_type,
        "file_size": d.file_size,
        "uploaded_at": d.uploaded_at,
    }
