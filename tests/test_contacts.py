"""Emergency contacts API tests."""


def test_new_user_has_no_contacts(client, make_user):
    user_id = make_user()
    r = client.get(f"/api/contacts/{user_id}")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": None, "contacts": []}


def test_set_contacts_overwrites_whole_list(client, make_user):
    user_id = make_user()
    client.post("/api/contacts", json={"userId": user_id, "contacts": ["111", "222"]})
    r = client.post("/api/contacts", json={"userId": user_id, "contacts": ["333"]})
    assert r.status_code == 200
    assert r.json()["message"] == "Contacts updated"
    assert r.json()["contacts"] == ["333"]
    assert client.get(f"/api/contacts/{user_id}").json()["contacts"] == ["333"]


def test_duplicates_and_order_preserved(client, make_user):
    user_id = make_user()
    r = client.post("/api/contacts", json={"userId": user_id, "contacts": ["222", "111", "222"]})
    assert r.json()["contacts"] == ["222", "111", "222"]


def test_contacts_unknown_user(client):
    assert client.get("/api/contacts/999999").status_code == 404
    r = client.post("/api/contacts", json={"userId": 999999, "contacts": ["1"]})
    assert r.status_code == 404
    assert r.json()["detail"] == "User not found"


def test_contact_longer_than_column_rejected(client, make_user):
    user_id = make_user()
    client.post("/api/contacts", json={"userId": user_id, "contacts": ["111"]})

    r = client.post("/api/contacts", json={"userId": user_id, "contacts": ["+91 98765 43210 / home"]})
    assert r.status_code == 422
    assert client.get(f"/api/contacts/{user_id}").json()["contacts"] == ["111"]


def test_contact_at_column_width_accepted_and_trimmed(client, make_user):
    user_id = make_user()
    r = client.post("/api/contacts", json={"userId": user_id, "contacts": ["  +91 98765 43210 9999  "]})
    assert r.status_code == 200
    assert r.json()["contacts"] == ["+91 98765 43210 9999"]
