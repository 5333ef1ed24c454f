import uuid

from fakes import application_body
from incubator.extensions import db
from incubator.models import Application, ReviewerAssignment

SCORES = {
    "needScore": 8,
    "noveltyScore": "7.5",
    "feasibilityScalabilityScore": 6.25,
    "marketPotentialScore": 9,
    "impactScore": 10,
}


def _submit(client, **overrides):
    resp = client.post("/api/applications", json=application_body(**overrides))
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]["id"]


def _status(app, app_id):
    with app.app_context():
        return db.session.get(Application, app_id).status


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_submit_and_fetch(client):
    resp = client.post("/api/applications", json=application_body())
    body = resp.get_json()
    assert resp.status_code == 201
    assert body["data"]["status"] == "pending"

    got = client.get(f"/api/applications/{body['data']['id']}").get_json()["application"]
    assert got["team_name"] == "Team Rocket"
    assert got["is_iitm"] is True
    assert "resume_token_hash" not in got


def test_submit_missing_field(client):
    resp = client.post("/api/applications", json=application_body(email=""))
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "invalid_input", "detail": "Missing required field: email"}


def test_bad_and_unknown_ids(client):
    assert client.get("/api/applications/not-a-uuid").status_code == 400
    resp = client.get(f"/api/applications/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


def test_list_pagination(client):
    for name in ("A", "B", "C"):
        _submit(client, teamName=name)
    body = client.get("/api/applications?limit=2&offset=0").get_json()
    assert len(body["applications"]) == 2
    assert body["pagination"] == {"total": 3, "limit": 2, "offset": 0}
    assert body["applications"][0]["reviewers"] == []
    assert client.get("/api/applications?limit=0").status_code == 400
    assert client.get("/api/applications?limit=201").status_code == 400
    assert client.get("/api/applications?offset=-1").status_code == 400


def test_draft_save_resume_update(client):
    resp = client.post("/api/applications/draft", json={"teamName": "Drafty", "email": "d@example.com"})
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    token = data["resumeToken"]

    by_query = client.get(f"/api/applications/draft/resume?token={token}")
    assert by_query.status_code == 200
    by_header = client.get("/api/applications/draft/resume", headers={"X-Resume-Token": token})
    draft = by_header.get_json()["application"]
    assert draft["id"] == data["id"]
    assert "resume_token_hash" not in draft and "resume_token_expiry" not in draft

    resp = client.post("/api/applications/draft", json={"applicationId": data["id"], "teamName": "Renamed"})
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"id": data["id"], "status": "draft"}

    assert client.get("/api/applications/draft/resume?token=wrong").status_code == 404


def test_manager_routes_need_a_manager(client, make_user):
    app_id = _submit(client)
    _, reviewer_headers = make_user("reviewer")
    url = f"/api/applications/{app_id}/invite-reviewer"
    assert client.post(url, json={"reviewerId": str(uuid.uuid4())}).status_code == 401
    assert client.post(url, json={"reviewerId": str(uuid.uuid4())}, headers={"Authorization": "Bearer junk"}).status_code == 401
    assert client.post(url, json={"reviewerId": str(uuid.uuid4())}, headers=reviewer_headers).status_code == 403


def test_review_workflow(client, make_user):
    app_id = _submit(client)
    _, manager = make_user("manager")
    r1_id, r1 = make_user("reviewer", name="R One")
    r2_id, r2 = make_user("reviewer", name="R Two")
    r3_id, r3 = make_user("reviewer", name="R Three")

    for rid in (r1_id, r2_id, r3_id):
        resp = client.post(f"/api/applications/{app_id}/invite-reviewer", json={"reviewerId": rid}, headers=manager)
        assert resp.status_code == 201, resp.get_json()
    dup = client.post(f"/api/applications/{app_id}/invite-reviewer", json={"reviewerId": r1_id}, headers=manager)
    assert dup.status_code == 409

    reviewers = client.get(f"/api/applications/{app_id}/reviewers", headers=manager).get_json()["reviewers"]
    assert {r["reviewer_name"] for r in reviewers} == {"R One", "R Two", "R Three"}

    assigned = client.get("/api/applications/assigned", headers=r1).get_json()["assignments"]
    assert [a["application_id"] for a in assigned] == [app_id]

    respond = f"/api/applications/{app_id}/reviewer-respond"
    assert client.post(respond, json={"accept": True}).status_code == 401
    assert client.post(respond, json={"accept": "yes"}, headers=r1).status_code == 400
    resp = client.post(respond, json={"accept": True}, headers=r1)
    assert resp.get_json() == {"message": "You have accepted the assignment", "accepted": True}
    assert _status(client.application, app_id) == "pending"
    client.post(respond, json={"accept": True}, headers=r2)
    client.post(respond, json={"accept": False}, headers=r3)
    assert _status(client.application, app_id) == "under_review"

    # reviewer identity for evaluations comes from x-reviewer-id
    url = f"/api/evaluations/application/{app_id}"
    assert client.put(url, json=SCORES).status_code == 401
    assert client.put(url, json=SCORES, headers={"x-reviewer-id": "nope"}).status_code == 401
    assert client.put(url, json=SCORES, headers={"x-reviewer-id": r3_id}).status_code == 403
    bad = client.put(url, json=dict(SCORES, needScore=10.555), headers={"x-reviewer-id": r1_id})
    assert bad.status_code == 400

    first = client.put(url, json=dict(SCORES, overallComment="promising"), headers={"x-reviewer-id": r1_id})
    assert first.status_code == 201
    evaluation = first.get_json()["evaluation"]
    assert evaluation["total_score"] == 40.75
    assert evaluation["overall_comment"] == "promising"
    again = client.put(url, json=SCORES, headers={"x-reviewer-id": r1_id})
    assert again.status_code == 200
    assert _status(client.application, app_id) == "under_review"

    created = client.post("/api/evaluations", json=dict(SCORES, applicationId=app_id), headers={"x-reviewer-id": r2_id})
    assert created.status_code == 201
    assert _status(client.application, app_id) == "evaluated"
    conflict = client.post("/api/evaluations", json=dict(SCORES, applicationId=app_id), headers={"x-reviewer-id": r2_id})
    assert conflict.status_code == 409

    eid = created.get_json()["evaluation"]["id"]
    patched = client.put(f"/api/evaluations/{eid}", json={"impactScore": 5}, headers={"x-reviewer-id": r2_id})
    assert patched.get_json()["evaluation"]["impact_score"] == 5.0
    assert client.put(f"/api/evaluations/{eid}", json={"impactScore": 5}, headers={"x-reviewer-id": r1_id}).status_code == 404

    own = client.get(url, headers={"x-reviewer-id": r3_id}).get_json()
    assert own == {"evaluation": None}

    assert client.get(f"{url}/all", headers=r1).status_code == 403
    everything = client.get(f"{url}/all", headers=manager).get_json()["evaluations"]
    assert {e["reviewer_name"] for e in everything} == {"R One", "R Two"}

    decided = client.patch(f"/api/applications/{app_id}/status", json={"status": "approved"}, headers=manager)
    assert decided.get_json()["data"]["status"] == "approved"


def test_remove_reviewer(client, make_user):
    app_id = _submit(client)
    _, manager = make_user("manager")
    rid, _ = make_user("reviewer")
    client.post(f"/api/applications/{app_id}/invite-reviewer", json={"reviewerId": rid}, headers=manager)
    resp = client.delete(f"/api/applications/{app_id}/reviewers/{rid}", headers=manager)
    assert resp.status_code == 200
    with client.application.app_context():
        assert ReviewerAssignment.query.count() == 0
    assert client.delete(f"/api/applications/{app_id}/reviewers/{rid}", headers=manager).status_code == 404


def test_users_and_login(client, make_user):
    _, manager = make_user("manager")
    resp = client.post("/api/users", json={"email": "rev@example.com", "fullName": "Rev", "role": "reviewer"},
                       headers=manager)
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert "password" in data

    users = client.get("/api/users", headers=manager).get_json()["users"]
    assert "rev@example.com" in {u["email_address"] for u in users}
    assert all("password_hash" not in u for u in users)

    bad = client.post("/api/auth/token", json={"email": "rev@example.com", "password": "wrong"})
    assert bad.status_code == 401
    login = client.post("/api/auth/token", json={"email": "rev@example.com", "password": data["password"]})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.get_json()['token']}"}

    assert client.get("/api/users", headers=headers).status_code == 403
    changed = client.put("/api/users/change-password", json={"newPassword": "brand-new-pass"}, headers=headers)
    assert changed.status_code == 200
    # the old token died with the old password
    assert client.get("/api/auth/me", headers=headers).status_code == 401

    dup = client.post("/api/users", json={"email": "rev@example.com", "fullName": "Again", "role": "reviewer"},
                      headers=manager)
    assert dup.status_code == 409
    deleted = client.delete(f"/api/users/{data['id']}", headers=manager)
    assert deleted.status_code == 200


def test_drafts_are_listed_only_on_request(client):
    _submit(client)
    client.post("/api/applications/draft", json={"teamName": "Hidden", "email": "h@example.com"})

    listed = client.get("/api/applications").get_json()
    assert [a["team_name"] for a in listed["applications"]] == ["Team Rocket"]
    assert listed["pagination"]["total"] == 1

    drafts = client.get("/api/applications?status=draft").get_json()["applications"]
    assert [a["team_name"] for a in drafts] == ["Hidden"]


def test_respond_checks_the_invitation_before_the_service(client, make_user):
    app_id = _submit(client)
    _, stranger = make_user("reviewer")
    resp = client.post(f"/api/applications/{app_id}/reviewer-respond", json={"accept": True}, headers=stranger)
    assert resp.status_code == 404
    assert resp.get_json()["detail"] == "No invitation found for this reviewer and application"


def test_users_routes_go_through_the_manager_check(client, make_user):
    _, startup = make_user("startup")
    resp = client.get("/api/users", headers=startup)
    assert resp.status_code == 403
    assert resp.get_json() == {"error": "forbidden", "detail": "Manager role required"}
