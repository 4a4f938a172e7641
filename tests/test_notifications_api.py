"""Delivery worker API tests."""

from tests.conftest import auth, make_operator, register_and_login


def _sos_with_contact(client):
    token, _ = register_and_login(client, "nw")
    client.post(
        "/contacts",
        headers=auth(token),
        json={"contact_name": "Dad", "contact_phone": "+15550008888"},
    )
    alert = client.post("/alerts", headers=auth(token), json={}).json()
    return token, alert


def test_worker_drains_queue_and_reports_status(client):
    _, alert = _sos_with_contact(client)
    worker_token, worker = register_and_login(client, "worker")
    make_operator(worker["id"])
    notification_id = alert["notifications"][0]["id"]

    queue = client.get("/notifications/pending?limit=500", headers=auth(worker_token)).json()
    assert notification_id in [n["id"] for n in queue]

    r = client.post(
        f"/notifications/{notification_id}/status",
        headers=auth(worker_token),
        json={"status": "sent", "sent_at": "2026-10-19T10:00:00Z"},
    )
    assert r.status_code == 200
    assert r.json()["status"] == "sent"
    assert r.json()["sent_at"] is not None

    queue = client.get("/notifications/pending?limit=500", headers=auth(worker_token)).json()
    assert notification_id not in [n["id"] for n in queue]

    again = client.post(
        f"/notifications/{notification_id}/status",
        headers=auth(worker_token),
        json={"status": "failed"},
    )
    assert again.status_code == 409


def test_worker_cannot_reset_to_pending(client):
    _, alert = _sos_with_contact(client)
    worker_token, worker = register_and_login(client, "worker2")
    make_operator(worker["id"])
    r = client.post(
        f"/notifications/{alert['notifications'][0]['id']}/status",
        headers=auth(worker_token),
        json={"status": "pending"},
    )
    assert r.status_code == 422


def test_regular_user_cannot_use_worker_api(client):
    token, alert = _sos_with_contact(client)
    assert client.get("/notifications/pending", headers=auth(token)).status_code == 403
    r = client.post(
        f"/notifications/{alert['notifications'][0]['id']}/status",
        headers=auth(token),
        json={"status": "sent"},
    )
    assert r.status_code == 403


def test_unknown_notification(client):
    worker_token, worker = register_and_login(client, "worker3")
    make_operator(worker["id"])
    r = client.post("/notifications/987654321/status", headers=auth(worker_token), json={"status": "sent"})
    assert r.status_code == 404
    assert r.json()["error_code"] == "NOT_FOUND"
