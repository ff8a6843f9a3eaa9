# armory_api/schemas/armory.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator


class ArmoryItemTypeIn(BaseModel):
    name: str
    is_unique: bool = True


class ArmoryItemTypeUpdate(BaseModel):
    name: str


class AssignmentIn(BaseModel):
    soldier_id: str
    quantity: int = Field(..., gt=0)


class ArmoryItemIn(BaseModel):
    """
    Body of POST /armory/items.

    Which fields are required depends on the selected item type, so the
    type's ``is_unique`` flag is passed in explicitly as validation context:

        ArmoryItemIn.model_validate(data, context={"is_unique": item_type.is_unique})

    Without that context only the field shapes are checked.
    """
    item_type_id: int
    item_id: Optional[str] = None
    linked_soldier_id: Optional[str] = None
    total_quantity: Optional[int] = None
    assignments: List[AssignmentIn] = []
    image_url: Optional[str] = None

    @field_validator("item_id", "linked_soldier_id")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def _fields_for_item_kind(self, info: ValidationInfo):
        ctx = info.context or {}
        if "is_unique" not in ctx:
            return self

        if ctx["is_unique"]:
            if not self.item_id:
                raise ValueError("item_id (serial number) is required for unique items")
            if self.total_quantity is not None or self.assignments:
                raise ValueError("unique items do not take total_quantity or assignments")
        else:
            if self.total_quantity is None:
                raise ValueError("total_quantity is required for quantity items")
            if self.total_quantity < 0:
                raise ValueError("total_quantity must be zero or positive")
            if self.item_id or self.linked_soldier_id:
                raise ValueError("quantity items do not take item_id or linked_soldier_id")
        return self


class ArmoryItemUpdate(BaseModel):
    item_id: Optional[str] = None
    image_url: Optional[str] = None
    total_quantity: Optional[int] = None


class QuantityIn(BaseModel):
    quantity: int = Field(..., ge=0)


class LinkIn(BaseModel):
    soldier_id: str


class ScanIn(BaseModel):
    photo_data_uri: str
