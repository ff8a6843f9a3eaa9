# armory_api/errors.py
"""
Domain errors raised by the services layer.

Every error carries a short machine-readable ``kind`` and the HTTP status
the API answers with; ``build_app`` registers a single handler that renders
them as ``{"detail": ..., "error": kind, **extra}``.
"""
from __future__ import annotations

from typing import Any


class ArmoryError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.kind, **self.extra}


class NotFoundError(ArmoryError):
    kind = "not_found"
    status_code = 404


class InvalidOperationError(ArmoryError):
    kind = "invalid"
    status_code = 400


class InvalidQuantityError(InvalidOperationError):
    pass


class NotQuantityItemError(InvalidOperationError):
    pass


class NotUniqueItemError(InvalidOperationError):
    pass


class InsufficientStockError(ArmoryError):
    kind = "insufficient_stock"
    status_code = 409

    def __init__(self, requested: int, headroom: int):
        super().__init__(
            f"Requested quantity {requested} exceeds available stock ({headroom})",
            requested=requested,
            headroom=headroom,
        )
        self.requested = requested
        self.headroom = headroom


class AlreadyLinkedError(ArmoryError):
    kind = "already_linked"
    status_code = 409

    def __init__(self, item_id: int, linked_soldier_id: str):
        super().__init__(
            f"Armory item {item_id} is already linked to soldier {linked_soldier_id}",
            linked_soldier_id=linked_soldier_id,
        )
        self.linked_soldier_id = linked_soldier_id


class ConflictError(ArmoryError):
    kind = "conflict"
    status_code = 409


class LedgerIntegrityError(ArmoryError):
    kind = "ledger_integrity"
    status_code = 500


class ScannerError(ArmoryError):
    kind = "scanner_error"
    status_code = 502


class ScannerUnavailableError(ArmoryError):
    kind = "scanner_unavailable"
    status_code = 503
