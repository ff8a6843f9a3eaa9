# armory_api/routers/documents.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy import select

from armory_api.db import SessionLocal
from armory_api.models.soldier import Soldier
from armory_api.models.soldier_document import SoldierDocument
from armory_api.schemas.soldier import DocumentRename
from armory_api.services import documents, views
from armory_api.storage import LocalBlobStorage, get_storage

router = APIRouter(prefix="/soldiers", tags=["documents"])


@router.get("/{soldier_id}/documents")
def list_documents(soldier_id: str):
    with SessionLocal() as s:
        if s.get(Soldier, soldier_id) is None:
            raise HTTPException(status_code=404, detail="Soldier not found")
        rows = s.execute(
            select(SoldierDocument)
            .where(SoldierDocument.soldier_id == soldier_id)
            .order_by(SoldierDocument.uploaded_at)
        ).scalars().all()
        return [views.serialize_document(d) for d in rows]


@router.post("/{soldier_id}/documents", status_code=201)
def upload_document(
    soldier_id: str,
    file: UploadFile = File(...),
    file_name: Optional[str] = Form(None),
    storage: LocalBlobStorage = Depends(get_storage),
):
    doc = documents.add_document(
        storage,
        soldier_id,
        file.filename or "",
        file.content_type,
        file.file,
        display_name=file_name,
    )
    return views.serialize_document(doc)


@router.patch("/{soldier_id}/documents/{document_id}")
def rename_document(soldier_id: str, document_id: str, payload: DocumentRename):
    return views.serialize_document(documents.rename_document(soldier_id, document_id, payload.file_name))


@router.delete("/{soldier_id}/documents/{document_id}", status_code=204)
def delete_document(soldier_id: str, document_id: str, storage: LocalBlobStorage = Depends(get_storage)):
    documents.delete_document(storage, soldier_id, document_id)
    return None
