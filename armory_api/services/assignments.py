# armory_api/services/assignments.py
"""Assignment manager for quantity (non-unique) armory items."""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from armory_api.errors import InvalidQuantityError, NotFoundError, NotQuantityItemError
from armory_api.models.armory_item import ArmoryItem
from armory_api.services import ledger
from armory_api.services.versioned import hold_soldier, run_versioned

logger = logging.getLogger(__name__)


def _load_item(s: Session, item_id: int) -> ArmoryItem:
    item = s.get(ArmoryItem, item_id)
    if item is None:
        raise NotFoundError(f"Armory item {item_id} not found")
    return item


def _load_quantity_item(s: Session, item_id: int) -> ArmoryItem:
    item = _load_item(s, item_id)
    if item.is_unique_item:
        raise NotQuantityItemError(f"Armory item {item_id} is a unique item; link it to a soldier instead")
    return item


def set_assignment(item_id: int, soldier_id: str, new_quantity: int) -> int:
    """
    Set exactly how many units of ``item_id`` ``soldier_id`` holds.

    Raises NotFoundError, NotQuantityItemError, InvalidQuantityError,
    InsufficientStockError (with the headroom) or ConflictError when
    concurrent writers kept winning. Returns the item id.
    """
    if new_quantity < 0:
        raise InvalidQuantityError("Quantity must be zero or positive", quantity=new_quantity)

    def _apply(s: Session) -> int:
        item = _load_quantity_item(s, item_id)
        hold_soldier(s, soldier_id)

        item.assignments = ledger.apply_assignment(
            item.total_quantity or 0, item.assignments, soldier_id, new_quantity
        )
        s.flush()
        logger.info(f"[assignments] item {item_id}: soldier {soldier_id} now holds {new_quantity}")
        return item.id

    return run_versioned(_apply, what="set_assignment")


def set_total_quantity(item_id: int, total_quantity: int) -> int:
    """Change the stock of a quantity item; never below what is already handed out."""
    return update_quantity_item(item_id, total_quantity=total_quantity)


def update_quantity_item(
    item_id: int,
    *,
    total_quantity: Optional[int] = None,
    image_url: Optional[str] = None,
) -> int:
    """Apply a PATCH to a quantity item in a single transaction."""
    if total_quantity is not None and total_quantity < 0:
        raise InvalidQuantityError("Total quantity must be zero or positive", quantity=total_quantity)

    def _apply(s: Session) -> int:
        item = _load_quantity_item(s, item_id)
        if total_quantity is not None:
            assigned = ledger.total_assigned(item.assignments)
            if total_quantity < assigned:
                raise InvalidQuantityError(
                    f"Total quantity {total_quantity} is below the {assigned} units already assigned",
                    assigned=assigned,
                )
            item.total_quantity = total_quantity
        if image_url is not None:
            item.image_url = image_url
        s.flush()
        if total_quantity is not None:
            logger.info(f"[assignments] item {item_id}: total quantity set to {total_quantity}")
        return item.id

    return run_versioned(_apply, what="update_quantity_item")
