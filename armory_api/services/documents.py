# armory_api/services/documents.py
from __future__ import annotations

import logging
import uuid
from typing import BinaryIO, Optional

from armory_api import db
from armory_api.errors import InvalidOperationError, NotFoundError
from armory_api.models.soldier import Soldier
from armory_api.models.soldier_document import SoldierDocument
from armory_api.services.versioned import hold_soldier, run_versioned
from armory_api.storage import BlobNotFoundError, LocalBlobStorage, document_key

logger = logging.getLogger(__name__)


def delete_blob_best_effort(storage: LocalBlobStorage, key: str) -> bool:
    """
    Remove a stored blob, logging instead of raising.

    Callers always go on to remove the metadata row, so a missing or
    undeletable blob never leaves a document entry stuck in the soldier file.
    """
    try:
        storage.delete(key)
        return True
    except BlobNotFoundError:
        logger.warning(f"[documents] blob {key} not found in storage, removing metadata anyway")
    except (OSError, ValueError) as e:
        logger.warning(f"[documents] failed to delete blob {key}: {e}")
    return False


def add_document(
    storage: LocalBlobStorage,
    soldier_id: str,
    file_name: str,
    file_type: Optional[str],
    data: BinaryIO,
    display_name: Optional[str] = None,
) -> SoldierDocument:
    if not file_name:
        raise InvalidOperationError("No file selected")

    with db.SessionLocal() as s:
        if s.get(Soldier, soldier_id) is None:
            raise NotFoundError(f"Soldier {soldier_id} not found")

    key = document_key(soldier_id, file_name)
    size = storage.put(key, data)

    def _apply(s) -> SoldierDocument:
        # a soldier deleted while the blob was uploading fails this write
        hold_soldier(s, soldier_id)
        doc = SoldierDocument(
            id=str(uuid.uuid4()),
            soldier_id=soldier_id,
            file_name=(display_name or "").strip() or file_name,
            storage_path=key,
            download_url=storage.url_for(key),
            file_type=file_type or "application/octet-stream",
            file_size=size,
        )
        s.add(doc)
        s.flush()
        return doc

    try:
        doc = run_versioned(_apply, what="add_document")
    except Exception:
        logger.error(f"[documents] metadata write failed for {key}, removing the uploaded blob")
        delete_blob_best_effort(storage, key)
        raise

    logger.info(f"[documents] stored {key} ({size} bytes) for soldier {soldier_id}")
    return doc


def _load_document(s, soldier_id: str, document_id: str) -> SoldierDocument:
    doc = s.get(SoldierDocument, document_id)
    if doc is None or doc.soldier_id != soldier_id:
        raise NotFoundError(f"Document {document_id} not found for soldier {soldier_id}")
    return doc


def rename_document(soldier_id: str, document_id: str, file_name: str) -> SoldierDocument:
    name = (file_name or "").strip()
    if not name:
        raise InvalidOperationError("File name required")
    with db.SessionLocal() as s:
        doc = _load_document(s, soldier_id, document_id)
        doc.file_name = name
        s.commit()
        return doc


def delete_document(storage: LocalBlobStorage, soldier_id: str, document_id: str) -> None:
    with db.SessionLocal() as s:
        doc = _load_document(s, soldier_id, document_id)
        delete_blob_best_effort(storage, doc.storage_path)
        s.delete(doc)
        s.commit()
        logger.info(f"[documents] removed document {document_id} of soldier {soldier_id}")
