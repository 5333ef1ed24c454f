from datetime import timedelta

import pytest

from fakes import FakeApplications, FakeAssignments, FakeClock, FakeUsers, application_body
from incubator.errors import Gone, InvalidInput, NotFound
from incubator.models import ReviewerAssignment
from incubator.services.intake import IntakeService, normalize_fields, parse_list, parse_yes_no
from incubator.utils.tokens import hash_token


@pytest.fixture
def world():
    apps, assignments, users, clock = FakeApplications(), FakeAssignments(), FakeUsers(), FakeClock()
    return IntakeService(apps, assignments, users, clock=clock), apps, assignments, users, clock


def test_submit_sets_pending_and_normalizes(world):
    service, _, _, _, clock = world
    app = service.submit_application(application_body(externalFunding='[{"source": "grant"}]')).value
    assert app.status == "pending"
    assert app.submitted_at == clock.now
    assert app.is_iitm is True
    assert app.mca_registered is False
    assert app.co_founders_count == 2
    assert app.external_funding == [{"source": "grant"}]
    assert app.faculty_involved == []


def test_missing_required_field_is_named(world):
    service = world[0]
    with pytest.raises(InvalidInput) as err:
        service.submit_application(application_body(pitchVideoLink="   "))
    assert "pitchVideoLink" in err.value.detail


def test_team_members_must_not_be_empty(world):
    service = world[0]
    with pytest.raises(InvalidInput) as err:
        service.submit_application(application_body(teamMembers="[]"))
    assert "teamMembers" in err.value.detail


def test_boolean_false_counts_as_present(world):
    service = world[0]
    app = service.submit_application(application_body(isIITM=False)).value
    assert app.is_iitm is False


@pytest.mark.parametrize("value,expected", [("Yes", True), ("no", False), ("TRUE", True), ("0", False), (True, True), ("", None)])
def test_yes_no_parsing(value, expected):
    assert parse_yes_no(value, "isIITM") is expected


def test_yes_no_rejects_other_text():
    with pytest.raises(InvalidInput):
        parse_yes_no("maybe", "isIITM")


def test_list_parsing_tolerates_bad_json():
    assert parse_list("not json") == []
    assert parse_list('["a", "b"]') == ["a", "b"]
    assert parse_list('{"a": 1}') == []


def test_co_founders_count_must_be_integer():
    with pytest.raises(InvalidInput):
        normalize_fields({"coFoundersCount": "two"})


def test_draft_round_trip(world):
    service, apps, _, _, clock = world
    app, token = service.save_draft({"teamName": "Drafty", "email": "d@example.com"}).value
    assert app.status == "draft"
    assert token
    # only the digest is stored
    assert app.resume_token_hash == hash_token(token)
    assert app.resume_token_hash != token

    clock.advance(timedelta(days=29))
    assert service.resume_draft(token).id == app.id


def test_expired_draft_is_gone(world):
    service, _, _, _, clock = world
    _, token = service.save_draft({"teamName": "Drafty"}).value
    clock.advance(timedelta(days=31))
    with pytest.raises(Gone):
        service.resume_draft(token)


def test_unknown_token_is_not_found(world):
    service = world[0]
    with pytest.raises(NotFound):
        service.resume_draft("nope")
    with pytest.raises(NotFound):
        service.resume_draft("")


def test_draft_update_replaces_fields(world):
    service = world[0]
    app, _ = service.save_draft({"teamName": "Drafty", "problemSolving": "X"}).value
    updated, token = service.save_draft({"teamName": "Renamed"}, application_id=app.id).value
    assert token is None
    assert updated.team_name == "Renamed"
    assert updated.problem_solving is None


def test_draft_update_requires_a_draft(world):
    service = world[0]
    submitted = service.submit_application(application_body()).value
    with pytest.raises(NotFound):
        service.save_draft({"teamName": "x"}, application_id=submitted.id)
    with pytest.raises(NotFound):
        service.save_draft({"teamName": "x"}, application_id="missing")


def test_submitting_a_draft_promotes_it(world):
    service, apps, _, _, _ = world
    draft, token = service.save_draft({"teamName": "Drafty"}).value
    app = service.submit_application(application_body(), application_id=draft.id).value
    assert app.id == draft.id
    assert app.status == "pending"
    assert app.resume_token_hash is None
    assert apps.count() == 1
    with pytest.raises(NotFound):
        service.resume_draft(token)


def test_list_applications_with_reviewers(world):
    service, _, assignments, users, clock = world
    app = service.submit_application(application_body()).value
    service.submit_application(application_body(teamName="Other")).value
    reviewer = users.make(name="Ravi")
    assignments.add(ReviewerAssignment(application_id=app.id, reviewer_id=reviewer.id, invite_status="pending",
                                       invited_at=clock.now))

    rows, total = service.list_applications(limit=10)
    assert total == 2
    reviewers = {a.id: r for a, r in rows}
    assert reviewers[app.id] == [{"id": reviewer.id, "full_name": "Ravi"}]

    rows, total = service.list_applications(status="draft")
    assert rows == [] and total == 0

    draft, _ = service.save_draft({"teamName": "Half done"}).value
    rows, total = service.list_applications(limit=10)
    assert total == 2 and draft.id not in {a.id for a, _ in rows}
    rows, total = service.list_applications(status="draft")
    assert [a.id for a, _ in rows] == [draft.id] and total == 1


def test_set_decision(world):
    service = world[0]
    app = service.submit_application(application_body()).value
    assert service.set_decision(app.id, "approved").value.status == "approved"
    with pytest.raises(InvalidInput):
        service.set_decision(app.id, "evaluated")
    draft, _ = service.save_draft({}).value
    with pytest.raises(NotFound):
        service.set_decision(draft.id, "rejected")
