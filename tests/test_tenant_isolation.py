import pytest

ENTITIES = [
    ("/api/clients", {"name": "Bob"}, {"name": "Hijacked"}),
    (
        "/api/appointments",
        {"start_time": "2026-03-02T10:00:00Z", "end_time": "2026-03-02T11:00:00Z"},
        {"start_time": "2026-03-03T10:00:00Z", "end_time": "2026-03-03T11:00:00Z", "notes": "Hijacked"},
    ),
    ("/api/invoices", {"amount": 120.0}, {"amount": 1.0, "status": "paid"}),
    ("/api/notes", {"content": "first session"}, {"content": "Hijacked"}),
    ("/api/documents", {"title": "Consent form"}, {"title": "Hijacked"}),
]


@pytest.mark.parametrize("path,body,attack", ENTITIES)
def test_other_therapist_cannot_touch_rows(client, alice, bob, path, body, attack):
    created = client.post(path, json=body, headers=alice["headers"])
    assert created.status_code == 201
    row = created.json()
    url = f"{path}/{row['id']}"

    assert client.get(path, headers=bob["headers"]).json() == []
    assert client.get(url, headers=bob["headers"]).status_code == 404
    assert client.put(url, json=attack, headers=bob["headers"]).status_code == 404
    assert client.delete(url, headers=bob["headers"]).status_code == 404

    # 원래 소유자의 행은 그대로
    after = client.get(url, headers=alice["headers"])
    assert after.status_code == 200
    assert after.json() == client.get(url, headers=alice["headers"]).json()
    assert after.json()["updated_at"] == row["updated_at"]
    for key, value in body.items():
        if key not in ("start_time", "end_time"):
            assert after.json()[key] == value


def test_missing_and_foreign_rows_look_the_same(client, alice, bob):
    row = client.post("/api/clients", json={"name": "Bob"}, headers=alice["headers"]).json()
    foreign = client.get(f"/api/clients/{row['id']}", headers=bob["headers"])
    missing = client.get("/api/clients/424242", headers=bob["headers"])
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()


@pytest.mark.parametrize("path,body", [
    ("/api/appointments", {"start_time": "2026-03-02T10:00:00Z", "end_time": "2026-03-02T11:00:00Z"}),
    ("/api/invoices", {"amount": 50}),
    ("/api/notes", {"content": "notes"}),
])
def test_cannot_reference_other_therapists_client(client, alice, bob, path, body):
    alice_client = client.post("/api/clients", json={"name": "Bob"}, headers=alice["headers"]).json()
    res = client.post(path, json={**body, "client_id": alice_client["id"]}, headers=bob["headers"])
    assert res.status_code == 400
    assert res.json() == {"error": "Unknown client_id"}
    assert client.get(path, headers=bob["headers"]).json() == []


def test_cannot_reference_other_therapists_appointment(client, alice, bob):
    appt = client.post(
        "/api/appointments",
        json={"start_time": "2026-03-02T10:00:00Z", "end_time": "2026-03-02T11:00:00Z"},
        headers=alice["headers"],
    ).json()
    res = client.post(
        "/api/notes",
        json={"content": "notes", "appointment_id": appt["id"]},
        headers=bob["headers"],
    )
    assert res.status_code == 400
    assert res.json() == {"error": "Unknown appointment_id"}


def test_dashboard_only_counts_own_rows(client, alice, bob):
    client.post("/api/clients", json={"name": "Bob"}, headers=alice["headers"])
    client.post("/api/invoices", json={"amount": 80}, headers=alice["headers"])

    summary = client.get("/api/analytics/dashboard", headers=bob["headers"]).json()
    assert summary == {
        "totalClients": 0,
        "periodAppointments": 0,
        "periodRevenue": 0,
        "outstandingBalance": 0,
    }
