# armory_api/schemas/soldier.py
from typing import Optional
from pydantic import BaseModel, field_validator


class DivisionIn(BaseModel):
    name: str


class SoldierIn(BaseModel):
    id: str                      # military ID number
    name: str
    division_id: Optional[int] = None

    @field_validator("id", "name")
    @classmethod
    def _not_blank(cls, v: str):
        v = (v or "").strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class SoldierUpdate(BaseModel):
    name: Optional[str] = None
    division_id: Optional[int] = None   # 0 moves the soldier to "unassigned"


class TransferIn(BaseModel):
    division_id: int


class DocumentRename(BaseModel):
    file_name: str
