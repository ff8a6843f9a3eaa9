# armory_api/schemas/__init__.py

# Armory
from .armory import (
    ArmoryItemTypeIn,
    ArmoryItemTypeUpdate,
    ArmoryItemIn,
    ArmoryItemUpdate,
    AssignmentIn,
    QuantityIn,
    LinkIn,
    ScanIn,
)

# Divisions / soldiers
from .soldier import (
    DivisionIn,
    SoldierIn,
    SoldierUpdate,
    TransferIn,
    DocumentRename,
)

__all__ = [
    "ArmoryItemTypeIn", "ArmoryItemTypeUpdate", "ArmoryItemIn", "ArmoryItemUpdate",
    "AssignmentIn", "QuantityIn", "LinkIn", "ScanIn",
    "DivisionIn", "SoldierIn", "SoldierUpdate", "TransferIn", "DocumentRename",
]
