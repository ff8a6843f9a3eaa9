# armory_api/routers/armory.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.exc import IntegrityError

from armory_api.db import SessionLocal
from armory_api.errors import NotFoundError
from armory_api.models.armory_item import ArmoryItem
from armory_api.models.armory_item_type import ArmoryItemType
from armory_api.models.soldier import Soldier
from armory_api.scanner import scan_armory_item
from armory_api.schemas.armory import (
    ArmoryItemIn,
    ArmoryItemTypeIn,
    ArmoryItemTypeUpdate,
    ArmoryItemUpdate,
    LinkIn,
    QuantityIn,
    ScanIn,
)
from armory_api.services import ledger, views
from armory_api.services.assignments import set_assignment, update_quantity_item
from armory_api.services.links import link_unique_item, unlink_unique_item
from armory_api.services.versioned import run_versioned

router = APIRouter(prefix="/armory", tags=["armory"])
logger = logging.getLogger(__name__)


# ---- Item types -------------------------------------------------------------

@router.get("/item-types")
def list_item_types():
    with SessionLocal() as s:
        rows = s.execute(select(ArmoryItemType).order_by(ArmoryItemType.name)).scalars().all()
        return [{"id": t.id, "name": t.name, "is_unique": t.is_unique} for t in rows]


@router.post("/item-types", status_code=201)
def create_item_type(payload: ArmoryItemTypeIn):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name required")
    with SessionLocal() as s:
        try:
            tid = s.execute(
                insert(ArmoryItemType)
                .values(name=name, is_unique=payload.is_unique)
                .returning(ArmoryItemType.id)
            ).scalar_one()
            s.commit()
        except IntegrityError:
            s.rollback()
            raise HTTPException(status_code=409, detail="Item type name already exists")
        logger.info(f"[armory] Created item type {tid} '{name}' (unique={payload.is_unique})")
        return {"id": tid, "name": name, "is_unique": payload.is_unique}


@router.patch("/item-types/{type_id}")
def update_item_type(type_id: int, payload: ArmoryItemTypeUpdate):
    # is_unique is fixed at creation; only the name can change
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name required")
    with SessionLocal() as s:
        try:
            res = s.execute(update(ArmoryItemType).where(ArmoryItemType.id == type_id).values(name=name))
            if res.rowcount == 0:
                raise HTTPException(status_code=404, detail="Item type not found")
            s.commit()
            return {"id": type_id, "name": name}
        except IntegrityError:
            s.rollback()
            raise HTTPException(status_code=409, detail="Item type name already exists")


@router.delete("/item-types/{type_id}", status_code=204)
def delete_item_type(type_id: int):
    with SessionLocal() as s:
        in_use = s.execute(
            select(func.count()).select_from(ArmoryItem).where(ArmoryItem.item_type_id == type_id)
        ).scalar_one()
        if in_use:
            raise HTTPException(status_code=400, detail="Item type is used by armory items")
        res = s.execute(delete(ArmoryItemType).where(ArmoryItemType.id == type_id))
        if res.rowcount == 0:
            raise HTTPException(status_code=404, detail="Item type not found")
        s.commit()
        return None


# ---- Items ------------------------------------------------------------------

def _item_out(item_id: int) -> dict:
    with SessionLocal() as s:
        item = s.get(ArmoryItem, item_id)
        if item is None:
            raise HTTPException(status_code=404, detail="Armory item not found")
        return views.serialize_items(s, [item])[0]


@router.get("/items")
def list_items(
    item_type_id: Optional[int] = Query(None),
    linked_soldier_id: Optional[str] = Query(None),
):
    with SessionLocal() as s:
        q = select(ArmoryItem).order_by(ArmoryItem.id)
        if item_type_id is not None:
            q = q.where(ArmoryItem.item_type_id == item_type_id)
        if linked_soldier_id is not None:
            q = q.where(ArmoryItem.linked_soldier_id == linked_soldier_id)
        rows = s.execute(q).scalars().all()
        return views.serialize_items(s, list(rows))


@router.get("/items/{item_id}")
def get_item(item_id: int):
    return _item_out(item_id)


@router.post("/items", status_code=201)
def create_item(body: dict = Body(...)):
    """
    Unique items need ``item_id`` and may be linked to a soldier right away;
    quantity items need ``total_quantity`` and may come with initial assignments.
    """
    try:
        shape = ArmoryItemIn.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    with SessionLocal() as s:
        item_type = s.get(ArmoryItemType, shape.item_type_id)
        if item_type is None:
            raise HTTPException(status_code=400, detail="item_type_id does not exist")

        try:
            payload = ArmoryItemIn.model_validate(body, context={"is_unique": item_type.is_unique})
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

        item = ArmoryItem(
            item_type_id=item_type.id,
            is_unique_item=item_type.is_unique,
            image_url=payload.image_url,
            assignments=[],
        )
        if item_type.is_unique:
            if payload.linked_soldier_id and s.get(Soldier, payload.linked_soldier_id) is None:
                raise HTTPException(status_code=400, detail="linked_soldier_id does not exist")
            item.item_id = payload.item_id
            item.linked_soldier_id = payload.linked_soldier_id
        else:
            requested = [a.model_dump() for a in payload.assignments]
            for a in requested:
                if s.get(Soldier, a["soldier_id"]) is None:
                    raise HTTPException(status_code=400, detail=f"soldier_id {a['soldier_id']} does not exist")
            item.total_quantity = payload.total_quantity
            item.assignments = ledger.validate_ledger(payload.total_quantity, requested)

        s.add(item)
        s.commit()
        new_id = item.id
        logger.info(f"[armory] Created armory item {new_id} of type {item_type.id}")

    return _item_out(new_id)


def _update_fields(item_id: int, values: dict) -> None:
    def _apply(s) -> int:
        item = s.get(ArmoryItem, item_id)
        if item is None:
            raise NotFoundError(f"Armory item {item_id} not found")
        for k, v in values.items():
            setattr(item, k, v)
        return item.id

    run_versioned(_apply, what="update_item")


@router.patch("/items/{item_id}")
def update_item(item_id: int, payload: ArmoryItemUpdate):
    with SessionLocal() as s:
        item = s.get(ArmoryItem, item_id)
        if item is None:
            raise HTTPException(status_code=404, detail="Armory item not found")
        is_unique = item.is_unique_item

    if is_unique:
        if payload.total_quantity is not None:
            raise HTTPException(status_code=400, detail="Unique items have no total_quantity")
        values = {}
        if payload.item_id is not None:
            serial = payload.item_id.strip()
            if not serial:
                raise HTTPException(status_code=400, detail="item_id (serial number) is required for unique items")
            values["item_id"] = serial
        if payload.image_url is not None:
            values["image_url"] = payload.image_url
        if values:
            _update_fields(item_id, values)
    else:
        if payload.item_id is not None:
            raise HTTPException(status_code=400, detail="Quantity items have no item_id")
        if payload.total_quantity is not None or payload.image_url is not None:
            update_quantity_item(
                item_id, total_quantity=payload.total_quantity, image_url=payload.image_url
            )

    return _item_out(item_id)


@router.delete("/items/{item_id}", status_code=204)
def delete_item(item_id: int):
    def _apply(s) -> None:
        item = s.get(ArmoryItem, item_id)
        if item is None:
            raise NotFoundError(f"Armory item {item_id} not found")
        s.delete(item)

    run_versioned(_apply, what="delete_item")
    logger.info(f"[armory] Deleted armory item {item_id}")
    return None


# ---- Assignments & links ----------------------------------------------------

@router.get("/items/{item_id}/assignments")
def list_assignments(item_id: int):
    out = _item_out(item_id)
    if out["is_unique_item"]:
        raise HTTPException(status_code=400, detail="Unique items have no assignment ledger")
    return {
        "item_id": item_id,
        "total_quantity": out["total_quantity"],
        "available_quantity": out["available_quantity"],
        "assignments": out["assignments"],
    }


@router.put("/items/{item_id}/assignments/{soldier_id}")
def put_assignment(item_id: int, soldier_id: str, payload: QuantityIn):
    set_assignment(item_id, soldier_id, payload.quantity)
    return _item_out(item_id)


@router.post("/items/{item_id}/link")
def link_item(item_id: int, payload: LinkIn):
    link_unique_item(item_id, payload.soldier_id)
    return _item_out(item_id)


@router.delete("/items/{item_id}/link")
def unlink_item(item_id: int):
    unlink_unique_item(item_id)
    return _item_out(item_id)


# ---- Image scanning ---------------------------------------------------------

@router.post("/scan")
def scan_item(payload: ScanIn):
    result = scan_armory_item(payload.photo_data_uri)
    with SessionLocal() as s:
        match = s.execute(
            select(ArmoryItemType.id).where(func.lower(ArmoryItemType.name) == result["item_type"].lower())
        ).scalar_one_or_none()
    return {**result, "item_type_id": match}
