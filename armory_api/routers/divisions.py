from fastapi import APIRouter, HTTPException
from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.exc import IntegrityError
import logging

from armory_api.db import SessionLocal
from armory_api.models.division import Division
from armory_api.models.soldier import Soldier
from armory_api.schemas.soldier import DivisionIn
from armory_api.services.views import division_armory_count

router = APIRouter(prefix="/divisions", tags=["divisions"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[dict])
def list_divisions():
    with SessionLocal() as s:
        rows = s.execute(select(Division.id, Division.name).order_by(Division.id)).all()
        members = s.execute(select(Soldier.id, Soldier.division_id)).all()

        by_division: dict[int, list[str]] = {}
        for m in members:
            if m.division_id is not None:
                by_division.setdefault(m.division_id, []).append(m.id)

        return [
            {
                "id": r.id,
                "name": r.name,
                "soldier_count": len(by_division.get(r.id, [])),
                "armory_item_count": division_armory_count(s, by_division.get(r.id, [])),
            }
            for r in rows
        ]


@router.post("", status_code=201)
def create_division(payload: DivisionIn):
    name = payload.name.strip()
    if not name:
        logger.warning("[divisions] Error: Empty name")
        raise HTTPException(status_code=400, detail="Name required")

    with SessionLocal() as s:
        try:
            res = s.execute(insert(Division).values(name=name).returning(Division.id))
            division_id = res.scalar_one()  # fetch before commit
            s.commit()
        except IntegrityError as e:
            s.rollback()
            logger.error(f"[divisions] IntegrityError: {e}")
            raise HTTPException(status_code=409, detail="Division name already exists")
        logger.info(f"[divisions] Created division {division_id} '{name}'")
        return {"id": division_id, "name": name}


@router.get("/{division_id}/soldiers")
def list_division_soldiers(division_id: int):
    with SessionLocal() as s:
        division = s.get(Division, division_id)
        if division is None:
            raise HTTPException(status_code=404, detail="Division not found")
        rows = s.execute(
            select(Soldier).where(Soldier.division_id == division_id).order_by(Soldier.name)
        ).scalars().all()
        return [
            {"id": x.id, "name": x.name, "division_id": x.division_id, "division_name": division.name}
            for x in rows
        ]


@router.patch("/{division_id}")
def update_division(division_id: int, payload: DivisionIn):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name required")
    with SessionLocal() as s:
        try:
            res = s.execute(
                update(Division)
                .where(Division.id == division_id)
                .values(name=name)
            )
            if res.rowcount == 0:
                raise HTTPException(status_code=404, detail="Division not found")
            s.commit()
            return {"id": division_id, "name": name}
        except IntegrityError:
            s.rollback()
            raise HTTPException(status_code=409, detail="Division name already exists")


@router.delete("/{division_id}", status_code=204)
def delete_division(division_id: int):
    with SessionLocal() as s:
        used = s.execute(
            select(func.count()).select_from(Soldier).where(Soldier.division_id == division_id)
        ).scalar_one()
        if used:
            raise HTTPException(
                status_code=400,
                detail="Division has soldiers assigned; move them to another division first",
            )
        res = s.execute(delete(Division).where(Division.id == division_id))
        if res.rowcount == 0:
            raise HTTPException(status_code=404, detail="Division not found")
        s.commit()
        logger.info(f"[divisions] Deleted division {division_id}")
        return None
