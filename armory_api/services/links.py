# armory_api/services/links.py
"""One-to-one links between unique armory items and soldiers."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from armory_api.errors import AlreadyLinkedError, NotFoundError, NotUniqueItemError
from armory_api.models.armory_item import ArmoryItem
from armory_api.models.soldier import Soldier
from armory_api.services.versioned import hold_soldier, run_versioned

logger = logging.getLogger(__name__)


def _load_unique_item(s: Session, item_id: int) -> ArmoryItem:
    item = s.get(ArmoryItem, item_id)
    if item is None:
        raise NotFoundError(f"Armory item {item_id} not found")
    if not item.is_unique_item:
        raise NotUniqueItemError(f"Armory item {item_id} is tracked by quantity; assign a quantity instead")
    return item


def link_unique_item(item_id: int, soldier_id: str) -> int:
    def _apply(s: Session) -> int:
        item = _load_unique_item(s, item_id)
        if s.get(Soldier, soldier_id) is None:
            raise NotFoundError(f"Soldier {soldier_id} not found")
        if item.linked_soldier_id == soldier_id:
            return item.id
        if item.linked_soldier_id is not None:
            raise AlreadyLinkedError(item_id, item.linked_soldier_id)
        hold_soldier(s, soldier_id)
        item.linked_soldier_id = soldier_id
        s.flush()
        logger.info(f"[links] item {item_id} linked to soldier {soldier_id}")
        return item.id

    return run_versioned(_apply, what="link_unique_item")


def unlink_unique_item(item_id: int) -> int:
    def _apply(s: Session) -> int:
        item = _load_unique_item(s, item_id)
        if item.linked_soldier_id is None:
            return item.id
        previous = item.linked_soldier_id
        item.linked_soldier_id = None
        s.flush()
        logger.info(f"[links] item {item_id} unlinked from soldier {previous}")
        return item.id

    return run_versioned(_apply, what="unlink_unique_item")
