"""Admin panel API tests."""

from tests.conftest import auth, make_operator, register_and_login


def test_admin_endpoints_require_operator(client):
    token, _ = register_and_login(client, "plain")
    for path in ("/admin/stats", "/admin/users", "/admin/alerts", "/admin/alerts/active"):
        r = client.get(path, headers=auth(token))
        assert r.status_code == 403
        assert r.json()["detail"] == "You do not have permission to access this page."


def test_stats_count_alerts(client):
    admin_token, admin = register_and_login(client, "stat")
    make_operator(admin["id"])
    before = client.get("/admin/stats", headers=auth(admin_token)).json()

    token, _ = register_and_login(client, "statu")
    alert = client.post("/alerts", headers=auth(token), json={}).json()
    mid = client.get("/admin/stats", headers=auth(admin_token)).json()
    assert mid["total_alerts"] == before["total_alerts"] + 1
    assert mid["active_alerts"] == before["active_alerts"] + 1
    assert mid["alerts_today"] == before["alerts_today"] + 1
    assert mid["total_users"] == before["total_users"] + 1

    client.post(f"/alerts/{alert['id']}/resolve", headers=auth(token))
    after = client.get("/admin/stats", headers=auth(admin_token)).json()
    assert after["active_alerts"] == before["active_alerts"]
    assert after["resolved_alerts"] == before["resolved_alerts"] + 1


def test_users_carry_full_role_set(client):
    admin_token, admin = register_and_login(client, "roles")
    make_operator(admin["id"], "admin")
    make_operator(admin["id"], "moderator")

    users = client.get("/admin/users", headers=auth(admin_token)).json()
    me = next(u for u in users if u["id"] == admin["id"])
    assert me["roles"] == ["admin", "moderator", "user"]


def test_admin_alert_lists(client):
    admin_token, admin = register_and_login(client, "lists")
    make_operator(admin["id"])
    token, owner = register_and_login(client, "listu", full_name="Owner Name")
    alert = client.post("/alerts", headers=auth(token), json={}).json()

    active = client.get("/admin/alerts/active", headers=auth(admin_token)).json()
    row = next(a for a in active if a["id"] == alert["id"])
    assert row["profile_name"] == "Owner Name"
    assert row["profile_email"] == owner["email"]

    client.post(f"/alerts/{alert['id']}/cancel", headers=auth(admin_token))
    cancelled = client.get("/admin/alerts?status=cancelled", headers=auth(admin_token)).json()
    assert alert["id"] in [a["id"] for a in cancelled]
    assert all(a["status"] == "cancelled" for a in cancelled)


def test_grant_and_revoke_roles(client):
    admin_token, admin = register_and_login(client, "grant")
    make_operator(admin["id"], "admin")
    token, target = register_and_login(client, "target")

    r = client.post(f"/admin/users/{target['id']}/roles", headers=auth(admin_token), json={"role": "moderator"})
    assert r.status_code == 200
    assert r.json()["roles"] == ["moderator", "user"]
    assert client.get("/admin/stats", headers=auth(token)).status_code == 200

    r = client.delete(f"/admin/users/{target['id']}/roles/moderator", headers=auth(admin_token))
    assert r.status_code == 204
    assert client.get("/admin/stats", headers=auth(token)).status_code == 403

    r = client.delete(f"/admin/users/{target['id']}/roles/moderator", headers=auth(admin_token))
    assert r.status_code == 404


def test_moderator_cannot_manage_roles(client):
    mod_token, mod = register_and_login(client, "modr")
    make_operator(mod["id"], "moderator")
    _, target = register_and_login(client, "modt")
    r = client.post(f"/admin/users/{target['id']}/roles", headers=auth(mod_token), json={"role": "admin"})
    assert r.status_code == 403
