def test_division_crud(client):
    r = client.post("/divisions", json={"name": "  Alpha "})
    assert r.status_code == 201
    division_id = r.json()["id"]
    assert r.json()["name"] == "Alpha"

    assert client.post("/divisions", json={"name": "Alpha"}).status_code == 409
    assert client.post("/divisions", json={"name": "   "}).status_code == 400

    r = client.patch(f"/divisions/{division_id}", json={"name": "Alef"})
    assert r.status_code == 200
    assert client.patch("/divisions/999", json={"name": "x"}).status_code == 404

    assert client.delete(f"/divisions/{division_id}").status_code == 204
    assert client.delete(f"/divisions/{division_id}").status_code == 404


def test_division_with_soldiers_cannot_be_deleted(client, seed):
    division_id = seed.division("Bravo")
    seed.soldier("1", division_id=division_id)

    r = client.delete(f"/divisions/{division_id}")
    assert r.status_code == 400


def test_division_counts(client, seed):
    division_id = seed.division("Bravo")
    seed.division("Empty")
    seed.soldier("1", name="Zohar", division_id=division_id)
    seed.soldier("2", name="Adi", division_id=division_id)
    seed.soldier("3")
    seed.unique_item("SN-1", linked_soldier_id="1")
    seed.quantity_item(10, [{"soldier_id": "2", "quantity": 3}, {"soldier_id": "3", "quantity": 4}])

    rows = {d["name"]: d for d in client.get("/divisions").json()}
    assert rows["Bravo"]["soldier_count"] == 2
    assert rows["Bravo"]["armory_item_count"] == 4
    assert rows["Empty"]["soldier_count"] == 0
    assert rows["Empty"]["armory_item_count"] == 0

    r = client.get(f"/divisions/{division_id}/soldiers")
    assert [x["name"] for x in r.json()] == ["Adi", "Zohar"]
