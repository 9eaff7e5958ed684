"""End-to-end behaviour of the HTTP surface."""

import uuid

from sqlalchemy import select

from app.models.models import AuditLog
from conftest import register


# ─── Auth ─────────────────────────────────────────────────


async def test_requests_without_token_are_rejected(client):
    for method, path in [("get", "/projects"), ("get", "/incidents"), ("post", "/threats")]:
        resp = await client.request(method.upper(), path)
        assert resp.status_code == 401


async def test_garbage_token_is_rejected(client):
    resp = await client.get("/projects", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


async def test_register_login_logout(client, fake_redis):
    headers, user = await register(client, "carol@acme-sec.io", "Carol", password="hunter22")
    assert user["role"] == "user"
    assert "password_hash" not in user

    me = await client.get("/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["email"] == "carol@acme-sec.io"

    bad = await client.post("/auth/login", json={"email": "carol@acme-sec.io", "password": "wrong"})
    assert bad.status_code == 401

    good = await client.post("/auth/login", json={"email": "Carol@acme-sec.io", "password": "hunter22"})
    assert good.status_code == 200
    login_headers = {"Authorization": f"Bearer {good.json()['access_token']}"}

    assert (await client.post("/auth/logout", headers=login_headers)).status_code == 200
    assert (await client.get("/auth/me", headers=login_headers)).status_code == 401
    # the registration session is independent of the one just revoked
    assert (await client.get("/auth/me", headers=headers)).status_code == 200


async def test_duplicate_registration_conflicts(client, alice_auth):
    resp = await client.post(
        "/auth/register",
        json={"email": "alice@acme-sec.io", "password": "whatever1", "display_name": "Alice 2"},
    )
    assert resp.status_code == 409


# ─── Projects ─────────────────────────────────────────────


async def test_project_ownership_scenarios(client, alice_auth, bob_auth):
    alice_headers, alice = alice_auth
    bob_headers, _ = bob_auth

    created = await client.post(
        "/projects", json={"name": "Web App Security"}, headers=alice_headers
    )
    assert created.status_code == 201
    project = created.json()
    assert project["owner_id"] == alice["id"]
    assert project["owner"]["display_name"] == "Alice"
    pid = project["id"]

    forbidden = await client.get(f"/projects/{pid}", headers=bob_headers)
    assert forbidden.status_code == 403
    assert forbidden.json() == {"detail": "Access denied", "error_code": "Forbidden"}

    owned = await client.get(f"/projects/{pid}", headers=alice_headers)
    assert owned.status_code == 200
    assert owned.json()["name"] == "Web App Security"

    missing = await client.get("/projects/nonexistent-id", headers=alice_headers)
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Project not found", "error_code": "NotFound"}

    assert (await client.get("/projects", headers=bob_headers)).json() == []

    assert (await client.delete(f"/projects/{pid}", headers=bob_headers)).status_code == 403
    assert (await client.get(f"/projects/{pid}", headers=alice_headers)).status_code == 200

    renamed = await client.put(f"/projects/{pid}", json={"name": "Renamed"}, headers=alice_headers)
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Renamed"
    assert (await client.put(f"/projects/{pid}", json={"name": "x"}, headers=bob_headers)).status_code == 403

    deleted = await client.delete(f"/projects/{pid}", headers=alice_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Project deleted successfully"}
    assert (await client.get(f"/projects/{pid}", headers=alice_headers)).status_code == 404


async def test_project_description_can_be_cleared(client, alice_auth):
    headers, _ = alice_auth
    pid = (await client.post(
        "/projects", json={"name": "Perimeter", "description": "old"}, headers=headers
    )).json()["id"]

    resp = await client.put(f"/projects/{pid}", json={"description": None}, headers=headers)

    assert resp.status_code == 200
    assert resp.json()["description"] is None
    assert resp.json()["name"] == "Perimeter"


async def test_project_mutations_are_audited(client, session_factory, alice_auth):
    headers, alice = alice_auth
    pid = (await client.post("/projects", json={"name": "Audited"}, headers=headers)).json()["id"]
    await client.delete(f"/projects/{pid}", headers=headers)

    async with session_factory() as db:
        rows = (await db.execute(select(AuditLog).order_by(AuditLog.id))).scalars().all()

    assert [r.action for r in rows] == ["create_project", "delete_project"]
    assert all(str(r.user_id) == alice["id"] and r.resource_id == pid for r in rows)


# ─── Incidents ────────────────────────────────────────────


async def test_incident_is_open_to_any_authenticated_caller(client, alice_auth, bob_auth):
    alice_headers, _ = alice_auth
    bob_headers, _ = bob_auth
    pid = (await client.post("/projects", json={"name": "Web App Security"}, headers=alice_headers)).json()["id"]

    created = await client.post(
        "/incidents", json={"title": "Data Breach Attempt", "project_id": pid}, headers=alice_headers
    )
    assert created.status_code == 201
    incident = created.json()
    assert incident["status"] == "open"
    assert incident["project"] == {"id": pid, "name": "Web App Security"}

    resolved = await client.patch(
        f"/incidents/{incident['id']}/status", json={"status": "resolved"}, headers=bob_headers
    )
    assert resolved.status_code == 200
    assert resolved.json()["status"] == "resolved"

    listed = (await client.get("/incidents", headers=bob_headers)).json()
    assert [i["id"] for i in listed] == [incident["id"]]

    assert (await client.delete(f"/incidents/{incident['id']}", headers=bob_headers)).status_code == 200
    assert (await client.get(f"/incidents/{incident['id']}", headers=alice_headers)).status_code == 404


async def test_incident_status_must_be_known(client, alice_auth):
    headers, _ = alice_auth
    iid = (await client.post("/incidents", json={"title": "x"}, headers=headers)).json()["id"]

    resp = await client.patch(f"/incidents/{iid}/status", json={"status": "escalated"}, headers=headers)
    assert resp.status_code == 422


async def test_incident_for_unknown_project_conflicts(client, alice_auth):
    headers, _ = alice_auth
    resp = await client.post(
        "/incidents", json={"title": "Dangling", "project_id": str(uuid.uuid4())}, headers=headers
    )
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "Conflict"


async def test_missing_incident_status_update_is_not_found(client, alice_auth):
    headers, _ = alice_auth
    resp = await client.patch(
        f"/incidents/{uuid.uuid4()}/status", json={"status": "closed"}, headers=headers
    )
    assert resp.status_code == 404


# ─── Threats, reports, search, dashboard ──────────────────


async def test_threat_endpoints(client, alice_auth, bob_auth):
    headers, _ = alice_auth
    bob_headers, _ = bob_auth
    created = await client.post(
        "/threats",
        json={"title": "SQL Injection Attack", "description": "Injected SQL", "severity": "high"},
        headers=headers,
    )
    assert created.status_code == 201
    tid = created.json()["id"]

    assert (await client.post(
        "/threats", json={"title": "x", "description": "y", "severity": "extreme"}, headers=headers
    )).status_code == 422

    updated = await client.put(f"/threats/{tid}", json={"severity": "critical"}, headers=bob_headers)
    assert updated.json()["severity"] == "critical"

    analysis = (await client.get("/threats/analysis", headers=headers)).json()
    assert analysis["analysis"]["total_threats"] == 1
    assert analysis["analysis"]["severity_breakdown"]["critical"] == 1

    assert (await client.delete(f"/threats/{tid}", headers=bob_headers)).status_code == 200
    assert (await client.get(f"/threats/{tid}", headers=headers)).status_code == 404


async def test_report_endpoints(client, alice_auth):
    headers, _ = alice_auth
    generated = await client.post(
        "/reports", json={"title": "Monthly", "type": "detailed"}, headers=headers
    )
    assert generated.status_code == 201
    rid = generated.json()["id"]
    assert generated.json()["type"] == "detailed"

    report = (await client.get(f"/reports/{rid}", headers=headers)).json()
    assert report["content"].startswith("# Detailed Security Report")
    assert report["download_url"] == f"/api/reports/{rid}/content"

    raw = await client.get(f"/reports/{rid}/content", headers=headers)
    assert raw.headers["content-type"].startswith("text/markdown")
    assert raw.text == report["content"]

    assert [r["id"] for r in (await client.get("/reports", headers=headers)).json()] == [rid]
    assert (await client.get("/reports/nope", headers=headers)).status_code == 404


async def test_search_respects_project_ownership(client, alice_auth, bob_auth):
    alice_headers, _ = alice_auth
    bob_headers, _ = bob_auth
    await client.post("/projects", json={"name": "Ransomware drill"}, headers=alice_headers)
    await client.post("/incidents", json={"title": "Ransomware note found"}, headers=alice_headers)

    alice_results = (await client.get("/search", params={"q": "ransomware"}, headers=alice_headers)).json()
    bob_results = (await client.get("/search", params={"q": "ransomware"}, headers=bob_headers)).json()

    assert alice_results["total_results"] == 2
    assert bob_results["total_results"] == 1
    assert bob_results["projects"] == []


async def test_dashboard_counts_only_own_projects_and_is_cached(client, fake_redis, alice_auth, bob_auth):
    alice_headers, _ = alice_auth
    bob_headers, _ = bob_auth
    await client.post("/projects", json={"name": "A"}, headers=alice_headers)
    await client.post("/incidents", json={"title": "I"}, headers=alice_headers)

    alice_dash = (await client.get("/dashboard", headers=alice_headers)).json()
    bob_dash = (await client.get("/dashboard", headers=bob_headers)).json()

    assert alice_dash["total_projects"] == 1
    assert bob_dash["total_projects"] == 0
    assert alice_dash["total_incidents"] == 1
    assert alice_dash["incident_status"]["open"] == 1
    assert any(k.startswith("dashboard:") for k in fake_redis.store)

    await client.post("/projects", json={"name": "B"}, headers=alice_headers)
    assert not any(k.startswith("dashboard:") for k in fake_redis.store)
    assert (await client.get("/dashboard", headers=alice_headers)).json()["total_projects"] == 2


async def test_users_can_only_edit_themselves(client, alice_auth, bob_auth):
    alice_headers, alice = alice_auth
    bob_headers, _ = bob_auth

    assert len((await client.get("/users", headers=alice_headers)).json()) == 2

    own = await client.patch(f"/users/{alice['id']}", json={"display_name": "Alice L."}, headers=alice_headers)
    assert own.status_code == 200
    assert own.json()["display_name"] == "Alice L."

    other = await client.patch(f"/users/{alice['id']}", json={"display_name": "x"}, headers=bob_headers)
    assert other.status_code == 403
    assert (await client.delete(f"/users/{alice['id']}", headers=bob_headers)).status_code == 403


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["redis"] is True
