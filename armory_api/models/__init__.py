# armory_api/models/__init__.py
# IMPORTANT: Use Base from armory_api.db since all models import from there
from armory_api.db import Base

# import all model modules so tables get registered on Base.metadata
from .division import Division
from .soldier import Soldier
from .soldier_document import SoldierDocument
from .armory_item_type import ArmoryItemType
from .armory_item import ArmoryItem


__all__ = [
    "Base",
    "Division",
    "Soldier",
    "SoldierDocument",
    "ArmoryItemType",
    "ArmoryItem",
]
