def test_note_type_defaults_to_session(client, alice):
    res = client.post("/api/notes", json={"content": "Initial intake"}, headers=alice["headers"])
    assert res.status_code == 201
    assert res.json()["type"] == "session"


def test_note_requires_content(client, alice):
    assert client.post("/api/notes", json={"type": "progress"}, headers=alice["headers"]).status_code == 400


def test_notes_filter_by_client(client, alice):
    bob = client.post("/api/clients", json={"name": "Bob"}, headers=alice["headers"]).json()
    eve = client.post("/api/clients", json={"name": "Eve"}, headers=alice["headers"]).json()
    client.post("/api/notes", json={"client_id": bob["id"], "content": "b1"}, headers=alice["headers"])
    client.post("/api/notes", json={"client_id": bob["id"], "content": "b2"}, headers=alice["headers"])
    client.post("/api/notes", json={"client_id": eve["id"], "content": "e1"}, headers=alice["headers"])

    all_notes = client.get("/api/notes", headers=alice["headers"]).json()
    assert len(all_notes) == 3

    bobs = client.get("/api/notes", params={"client_id": bob["id"]}, headers=alice["headers"]).json()
    assert [n["content"] for n in bobs] == ["b2", "b1"]
    assert {n["client_name"] for n in bobs} == {"Bob"}


def test_note_linked_to_appointment(client, alice):
    appt = client.post(
        "/api/appointments",
        json={"start_time": "2026-03-02T10:00:00Z", "end_time": "2026-03-02T11:00:00Z"},
        headers=alice["headers"],
    ).json()
    note = client.post(
        "/api/notes",
        json={"appointment_id": appt["id"], "content": "SOAP", "type": "soap", "session_date": "2026-03-02"},
        headers=alice["headers"],
    )
    assert note.status_code == 201
    assert note.json()["appointment_id"] == appt["id"]

    res = client.put(
        f"/api/notes/{note.json()['id']}", json={"content": "SOAP (edited)"}, headers=alice["headers"]
    )
    assert res.json()["content"] == "SOAP (edited)"
    assert res.json()["appointment_id"] is None
    assert res.json()["type"] == "session"


def test_document_crud(client, alice):
    res = client.post(
        "/api/documents",
        json={"title": "Consent form", "category": "consent", "file_url": "https://files.example.com/a.pdf"},
        headers=alice["headers"],
    )
    assert res.status_code == 201
    doc = res.json()
    assert doc["file_type"] is None

    assert [d["id"] for d in client.get("/api/documents", headers=alice["headers"]).json()] == [doc["id"]]

    res = client.put(
        f"/api/documents/{doc['id']}",
        json={"title": "Consent form v2", "file_type": "pdf"},
        headers=alice["headers"],
    )
    assert res.json()["title"] == "Consent form v2"
    assert res.json()["category"] is None

    res = client.delete(f"/api/documents/{doc['id']}", headers=alice["headers"])
    assert res.json() == {"message": "Document deleted successfully"}
    assert client.get("/api/documents", headers=alice["headers"]).json() == []
