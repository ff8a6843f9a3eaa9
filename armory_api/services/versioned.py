# armory_api/services/versioned.py
from __future__ import annotations

import logging
from typing import Callable, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError

from armory_api import db
from armory_api.errors import ConflictError, NotFoundError
from armory_api.models.soldier import Soldier

logger = logging.getLogger(__name__)

T = TypeVar("T")

# first try + two retries with fresh data
MAX_ATTEMPTS = 3


def run_versioned(fn: Callable[[Session], T], *, what: str, attempts: int = MAX_ATTEMPTS) -> T:
    """
    Run ``fn`` in its own session and commit, repeating on a version clash.

    ``fn`` must re-read everything it needs from the session it is given, so a
    retry sees the other writer's committed data and re-checks its rules.
    Domain errors raised by ``fn`` propagate untouched and nothing is written.
    """
    for attempt in range(1, attempts + 1):
        with db.SessionLocal() as s:
            try:
                result = fn(s)
                s.commit()
                return result
            except StaleDataError:
                s.rollback()
                logger.warning(f"[{what}] concurrent update detected (attempt {attempt}/{attempts})")
    raise ConflictError(f"{what}: the record was changed by another request, try again")


def hold_soldier(s: Session, soldier_id: str) -> Soldier:
    """
    Load ``soldier_id`` and mark the row dirty so the flush bumps its version.

    A soldier deleted (or otherwise rewritten) after this read makes the
    flush raise StaleDataError; the retry then finds the soldier gone.
    """
    soldier = s.get(Soldier, soldier_id)
    if soldier is None:
        raise NotFoundError(f"Soldier {soldier_id} not found")
    flag_modified(soldier, "name")
    return soldier
