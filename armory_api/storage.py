# armory_api/storage.py
"""
Blob storage for soldier documents.

Keys look like ``soldiers/{soldier_id}/documents/{unique_file_name}``. The
local implementation writes under ``STORAGE_ROOT`` and hands out URLs below
``STORAGE_BASE_URL``, which ``main.build_app`` serves as static files.
"""
from __future__ import annotations

import os
import shutil
import uuid
from typing import BinaryIO


class BlobNotFoundError(Exception):
    pass


def document_key(soldier_id: str, file_name: str) -> str:
    safe_name = os.path.basename(file_name or "file").replace(" ", "_") or "file"
    return f"soldiers/{soldier_id}/documents/{uuid.uuid4()}-{safe_name}"


class LocalBlobStorage:
    def __init__(self, root: str, base_url: str = "/files"):
        self.root = os.path.abspath(root)
        self.base_url = base_url.rstrip("/")

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if not path.startswith(self.root + os.sep):
            raise ValueError(f"Invalid storage key: {key}")
        return path

    def put(self, key: str, data: BinaryIO) -> int:
        """Store ``data`` under ``key``; returns the number of bytes written."""
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as out:
            shutil.copyfileobj(data, out)
        return os.path.getsize(path)

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    def delete(self, key: str) -> None:
        path = self._path(key)
        if not os.path.exists(path):
            raise BlobNotFoundError(key)
        os.remove(path)


def storage_root() -> str:
    return os.getenv("STORAGE_ROOT", "./storage")


# FastAPI dependency
def get_storage() -> LocalBlobStorage:
    return LocalBlobStorage(storage_root(), os.getenv("STORAGE_BASE_URL", "/files"))
