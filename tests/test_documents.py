def _upload(client, soldier_id="A", name="orders.pdf", content=b"%PDF-1.4 orders", mime="application/pdf", **data):
    return client.post(f"/soldiers/{soldier_id}/documents", files={"file": (name, content, mime)}, data=data)


def test_upload_and_list(client, seed, storage):
    seed.soldier("A")
    r = _upload(client)
    assert r.status_code == 201
    doc = r.json()
    assert doc["file_name"] == "orders.pdf"
    assert doc["file_type"] == "application/pdf"
    assert doc["file_size"] == len(b"%PDF-1.4 orders")
    assert doc["storage_path"].startswith("soldiers/A/documents/")
    assert doc["storage_path"].endswith("-orders.pdf")
    assert doc["download_url"] == f"/files/{doc['storage_path']}"
    assert storage.blobs[doc["storage_path"]] == b"%PDF-1.4 orders"

    listed = client.get("/soldiers/A/documents").json()
    assert [d["id"] for d in listed] == [doc["id"]]


def test_upload_with_display_name_and_rename(client, seed):
    seed.soldier("A")
    doc = _upload(client, file_name="Enlistment form").json()
    assert doc["file_name"] == "Enlistment form"

    r = client.patch(f"/soldiers/A/documents/{doc['id']}", json={"file_name": "Form 101"})
    assert r.status_code == 200
    assert r.json()["file_name"] == "Form 101"


def test_upload_for_missing_soldier(client, storage):
    r = _upload(client, soldier_id="ghost")
    assert r.status_code == 404
    assert storage.blobs == {}


def test_delete_document(client, seed, storage):
    seed.soldier("A")
    doc = _upload(client).json()

    assert client.delete(f"/soldiers/A/documents/{doc['id']}").status_code == 204
    assert storage.blobs == {}
    assert client.get("/soldiers/A/documents").json() == []


def test_delete_document_when_blob_is_gone(client, seed, storage):
    seed.soldier("A")
    doc = _upload(client).json()
    storage.blobs.clear()

    assert client.delete(f"/soldiers/A/documents/{doc['id']}").status_code == 204
    assert client.get("/soldiers/A/documents").json() == []


def test_delete_document_when_storage_fails(client, seed, storage):
    seed.soldier("A")
    doc = _upload(client).json()
    storage.fail_deletes = True

    assert client.delete(f"/soldiers/A/documents/{doc['id']}").status_code == 204
    assert client.get("/soldiers/A/documents").json() == []
    # the blob is left behind, the metadata is not
    assert doc["storage_path"] in storage.blobs


def test_document_belongs_to_soldier(client, seed):
    seed.soldier("A")
    seed.soldier("B")
    doc = _upload(client).json()
    assert client.delete(f"/soldiers/B/documents/{doc['id']}").status_code == 404
