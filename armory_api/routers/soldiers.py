# armory_api/routers/soldiers.py
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from armory_api.db import SessionLocal
from armory_api.errors import NotFoundError
from armory_api.models.division import Division
from armory_api.models.soldier import Soldier
from armory_api.schemas.soldier import SoldierIn, SoldierUpdate, TransferIn
from armory_api.services import views
from armory_api.services.soldiers import delete_soldier as delete_soldier_cascade
from armory_api.services.versioned import run_versioned
from armory_api.storage import LocalBlobStorage, get_storage

router = APIRouter(prefix="/soldiers", tags=["soldiers"])
logger = logging.getLogger(__name__)


def _check_division(s, division_id: int) -> None:
    if s.execute(select(Division.id).where(Division.id == division_id)).scalar_one_or_none() is None:
        raise HTTPException(status_code=400, detail="division_id does not exist")


def _update_soldier(soldier_id: str, values: dict) -> None:
    def _apply(s) -> None:
        soldier = s.get(Soldier, soldier_id)
        if soldier is None:
            raise NotFoundError(f"Soldier {soldier_id} not found")
        for k, v in values.items():
            setattr(soldier, k, v)

    run_versioned(_apply, what="update_soldier")


@router.get("")
def list_soldiers():
    with SessionLocal() as s:
        rows = (
            s.execute(
                select(Soldier)
                .options(selectinload(Soldier.division))
                .order_by(Soldier.name)
            )
            .scalars()
            .all()
        )
        return [
            {
                "id": x.id,
                "name": x.name,
                "division_id": x.division_id,
                "division_name": x.division_name,
                "document_count": len(x.documents or []),
            }
            for x in rows
        ]


@router.post("", status_code=201)
def create_soldier(payload: SoldierIn):
    with SessionLocal() as s:
        if s.get(Soldier, payload.id) is not None:
            raise HTTPException(status_code=409, detail=f"Soldier with id {payload.id} already exists")
        if payload.division_id is not None:
            _check_division(s, payload.division_id)
        try:
            s.add(Soldier(id=payload.id, name=payload.name, division_id=payload.division_id))
            s.commit()
        except IntegrityError:
            s.rollback()
            raise HTTPException(status_code=409, detail=f"Soldier with id {payload.id} already exists")
        logger.info(f"[soldiers] Created soldier {payload.id}")
        return {"id": payload.id, "name": payload.name, "division_id": payload.division_id}


@router.get("/{soldier_id}")
def get_soldier(soldier_id: str):
    with SessionLocal() as s:
        x = s.get(Soldier, soldier_id, options=[selectinload(Soldier.division)])
        if x is None:
            raise HTTPException(status_code=404, detail="Soldier not found")
        return {
            "id": x.id,
            "name": x.name,
            "division_id": x.division_id,
            "division_name": x.division_name,
            "documents": [views.serialize_document(d) for d in (x.documents or [])],
            "assigned_unique_items": views.assigned_unique_items(s, soldier_id),
            "assigned_quantity_items": views.assigned_quantity_items(s, soldier_id),
        }


@router.get("/{soldier_id}/assignable-items")
def list_assignable_items(soldier_id: str):
    with SessionLocal() as s:
        if s.get(Soldier, soldier_id) is None:
            raise HTTPException(status_code=404, detail="Soldier not found")
        return views.assignable_items(s, soldier_id)


@router.patch("/{soldier_id}")
def update_soldier(soldier_id: str, payload: SoldierUpdate):
    with SessionLocal() as s:
        if s.get(Soldier, soldier_id) is None:
            raise HTTPException(status_code=404, detail="Soldier not found")

        values = {}
        if payload.name is not None:
            name = payload.name.strip()
            if not name:
                raise HTTPException(status_code=400, detail="Name required")
            values["name"] = name

        if payload.division_id is not None:
            if payload.division_id == 0:
                values["division_id"] = None
            else:
                _check_division(s, payload.division_id)
                values["division_id"] = payload.division_id

        if not values:
            return {"id": soldier_id}

    _update_soldier(soldier_id, values)
    return {"id": soldier_id, **values}


@router.post("/{soldier_id}/transfer")
def transfer_soldier(soldier_id: str, payload: TransferIn):
    with SessionLocal() as s:
        soldier = s.get(Soldier, soldier_id)
        if soldier is None:
            raise HTTPException(status_code=404, detail="Soldier not found")
        _check_division(s, payload.division_id)
        previous = soldier.division_id

    _update_soldier(soldier_id, {"division_id": payload.division_id})
    logger.info(f"[soldiers] Moved soldier {soldier_id} from division {previous} to {payload.division_id}")
    return {"id": soldier_id, "division_id": payload.division_id}


@router.delete("/{soldier_id}", status_code=204)
def delete_soldier(soldier_id: str, storage: LocalBlobStorage = Depends(get_storage)):
    """
    Deletes a soldier.
    Linked unique items return to inventory, quantity assignments are released,
    document blobs are removed best-effort.
    """
    delete_soldier_cascade(storage, soldier_id)
    return None
