import pytest

import stores

FIELDS = ["medicinename", "exp_date", "address", "phone", "photo", "description"]


def test_donate_and_list_on_home(client, listing):
    r = client.post("/api/donate", json=listing())
    assert r.status_code == 201
    assert r.json() == {"message": "Medicine donated successfully"}

    r = client.get("/api/login/home")
    assert r.status_code == 200
    items = r.json()
    assert len(items) == 1
    item = items[0]
    assert item["medicinename"] == "Paracetamol"
    assert item["exp_date"].startswith("2027-05-01")
    assert "id" in item and "_id" not in item


@pytest.mark.parametrize("field", FIELDS)
def test_donate_missing_field_persists_nothing(client, db, listing, field):
    body = listing()
    body.pop(field)
    r = client.post("/api/donate", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "All fields are required"}
    assert db["medicine"].count_documents({}) == 0


def test_donate_empty_field_is_rejected(client, db, listing):
    r = client.post("/api/donate", json=listing(photo=""))
    assert r.status_code == 400
    assert db["medicine"].count_documents({}) == 0


def test_donate_bad_date_is_rejected(client, db, listing):
    r = client.post("/api/donate", json=listing(exp_date="next spring"))
    assert r.status_code == 400
    assert "exp_date" in r.json()["error"]
    assert db["medicine"].count_documents({}) == 0


def test_collect_medicine_by_exact_address(client, listing):
    client.post("/api/donate", json=listing(address="A street"))
    client.post("/api/donate", json=listing(medicinename="Ibuprofen", address="B street"))

    names = [m["medicinename"] for m in client.get("/api/collect-medicine/A street").json()]
    assert names == ["Paracetamol"]
    names = [m["medicinename"] for m in client.get("/api/collect-medicine/B street").json()]
    assert names == ["Ibuprofen"]
    assert client.get("/api/collect-medicine/A").json() == []


def test_request_medicine_by_name(client, listing):
    client.post("/api/donate", json=listing())
    r = client.get("/api/request/Paracetamol")
    assert r.status_code == 200
    assert r.json()["address"] == "12 Nile St"

    r = client.get("/api/request/Aspirin")
    assert r.status_code == 404
    assert r.json() == {"error": "Medicine not found"}


def test_delete_removes_exactly_one_match(client, db, listing):
    client.post("/api/donate", json=listing(address="first"))
    client.post("/api/donate", json=listing(address="second"))

    r = client.delete("/api/delete/Paracetamol")
    assert r.status_code == 200
    assert r.json() == {"message": "Medicine deleted successfully"}
    assert db["medicine"].count_documents({"medicinename": "Paracetamol"}) == 1

    assert client.delete("/api/delete/Paracetamol").status_code == 200
    r = client.delete("/api/delete/Paracetamol")
    assert r.status_code == 404
    assert r.json() == {"error": "Medicine not found"}


def test_autocomplete_matches_substrings_ignoring_case(client, listing):
    for name in ["Paracetamol", "Ibuprofen", "Sparax"]:
        client.post("/api/donate", json=listing(medicinename=name))

    r = client.get("/api/autocomplete/par")
    assert r.status_code == 200
    assert sorted(r.json()["suggestions"]) == ["Paracetamol", "Sparax"]

    assert client.get("/api/autocomplete/CETAMOL").json() == {"suggestions": ["Paracetamol"]}
    assert client.get("/api/autocomplete/xyz").json() == {"suggestions": []}


def test_autocomplete_treats_query_literally(client, listing):
    client.post("/api/donate", json=listing(medicinename="Vitamin C (1000mg)"))
    client.post("/api/donate", json=listing(medicinename="Vitamin D"))

    assert client.get("/api/autocomplete/(1000").json() == {"suggestions": ["Vitamin C (1000mg)"]}
    assert client.get("/api/autocomplete/Vit.min").json() == {"suggestions": []}


def test_listing_store_failure_is_server_error(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(stores, "list_listings", boom)
    monkeypatch.setattr(stores, "search_listing_names", boom)
    monkeypatch.setattr(stores, "delete_listing_by_name", boom)

    r = client.get("/api/login/home")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch donated medicines"}
    assert client.get("/api/autocomplete/par").json() == {"error": "Internal server error"}
    assert client.delete("/api/delete/Paracetamol").json() == {"error": "Failed to delete medicine"}


def test_donate_accepts_timestamps_and_numeric_phone(client, db, listing):
    body = listing(exp_date="2027-05-01T10:30:00.000Z", phone=1001234567)
    r = client.post("/api/donate", json=body)
    assert r.status_code == 201

    doc = db["medicine"].find_one({"medicinename": "Paracetamol"})
    assert doc["phone"] == "1001234567"
    item = client.get("/api/request/Paracetamol").json()
    assert item["exp_date"].startswith("2027-05-01T10:30:00")
    assert item["phone"] == "1001234567"
