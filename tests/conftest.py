"""
Pytest configuration and fixtures.

DATABASE_URL and STORAGE_ROOT are pointed at a temporary directory before the
app is imported, the same way start.py picks SQLite before importing it.
"""
import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="armory-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["STORAGE_ROOT"] = os.path.join(_TMP, "storage")
os.environ.pop("SCANNER_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from armory_api import models  # noqa: E402,F401
from armory_api.db import Base, SessionLocal, engine  # noqa: E402
from armory_api.main import app  # noqa: E402
from armory_api.models import ArmoryItem, ArmoryItemType, Division, Soldier  # noqa: E402
from armory_api.storage import BlobNotFoundError, get_storage  # noqa: E402


class MemoryBlobStorage:
    """Blob storage kept in a dict; ``fail_deletes`` simulates an unreachable store."""

    def __init__(self):
        self.blobs = {}
        self.fail_deletes = False

    def put(self, key, data):
        content = data.read()
        self.blobs[key] = content
        return len(content)

    def url_for(self, key):
        return f"/files/{key}"

    def delete(self, key):
        if self.fail_deletes:
            raise OSError("storage unreachable")
        if key not in self.blobs:
            raise BlobNotFoundError(key)
        del self.blobs[key]


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def storage():
    return MemoryBlobStorage()


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def seed():
    """Helpers that write rows directly, bypassing the API."""

    class Seed:
        def division(self, name="Alpha"):
            with SessionLocal() as s:
                d = Division(name=name)
                s.add(d)
                s.commit()
                return d.id

        def soldier(self, soldier_id, name=None, division_id=None):
            with SessionLocal() as s:
                s.add(Soldier(id=soldier_id, name=name or f"Soldier {soldier_id}", division_id=division_id))
                s.commit()
                return soldier_id

        def item_type(self, name, is_unique):
            with SessionLocal() as s:
                t = ArmoryItemType(name=name, is_unique=is_unique)
                s.add(t)
                s.commit()
                return t.id

        def unique_item(self, serial, linked_soldier_id=None, type_name="Rifle"):
            type_id = self._type(type_name, True)
            with SessionLocal() as s:
                item = ArmoryItem(
                    item_type_id=type_id,
                    is_unique_item=True,
                    item_id=serial,
                    linked_soldier_id=linked_soldier_id,
                    assignments=[],
                )
                s.add(item)
                s.commit()
                return item.id

        def quantity_item(self, total, assignments=None, type_name="Magazine"):
            type_id = self._type(type_name, False)
            with SessionLocal() as s:
                item = ArmoryItem(
                    item_type_id=type_id,
                    is_unique_item=False,
                    total_quantity=total,
                    assignments=list(assignments or []),
                )
                s.add(item)
                s.commit()
                return item.id

        def _type(self, name, is_unique):
            with SessionLocal() as s:
                t = s.query(ArmoryItemType).filter_by(name=name).one_or_none()
                if t is not None:
                    return t.id
            return self.item_type(name, is_unique)

    return Seed()


@pytest.fixture
def load_item():
    def _load(item_id):
        with SessionLocal() as s:
            return s.get(ArmoryItem, item_id)
    return _load
