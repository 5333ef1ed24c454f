from flask import Blueprint, jsonify, request
from flask_login import current_user

from ..errors import InvalidInput
from ..services import intake_service, policy, reviewer_service
from ..services.events import DraftResumeLink, Outcome
from ..services.policy import Capability
from ..utils.decorators import is_uuid, login_required, manager_required, uuid_args
from .common import commit, json_body
from .serializers import application_to_dict, assignment_to_dict

bp = Blueprint("applications", __name__)

MAX_PAGE_SIZE = 200


def _int_arg(name, default, low, high=None):
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidInput(f"{name} must be an integer")
    if value < low or (high is not None and value > high):
        bound = f"between {low} and {high}" if high is not None else f"at least {low}"
        raise InvalidInput(f"{name} must be {bound}")
    return value


def _application_id(body):
    value = body.get("applicationId")
    if value in (None, ""):
        return None
    if not is_uuid(value):
        raise InvalidInput("applicationId must be a valid UUID")
    return value


@bp.post("/api/applications")
def submit_application():
    body = json_body()
    outcome = intake_service().submit_application(body, application_id=_application_id(body))
    commit(outcome)
    application = outcome.value
    return jsonify({
        "message": "Application submitted successfully",
        "data": {"id": application.id, "status": application.status},
    }), 201


@bp.get("/api/applications")
def list_applications():
    status = request.args.get("status") or None
    limit = _int_arg("limit", 50, 1, MAX_PAGE_SIZE)
    offset = _int_arg("offset", 0, 0)
    rows, total = intake_service().list_applications(status=status, limit=limit, offset=offset)
    return jsonify({
        "applications": [application_to_dict(app, reviewers) for app, reviewers in rows],
        "pagination": {"total": total, "limit": limit, "offset": offset},
    })


@bp.post("/api/applications/draft")
def save_draft():
    body = json_body()
    outcome = intake_service().save_draft(body, application_id=_application_id(body))
    application, token = outcome.value
    if token is None:
        commit(outcome)
        return jsonify({
            "message": "Draft updated",
            "data": {"id": application.id, "status": application.status},
        })

    if application.email:
        outcome = Outcome(outcome.value, [DraftResumeLink(application_id=application.id, email=application.email,
                                                          token=token)])
    commit(outcome)
    return jsonify({
        "message": "Draft saved",
        "data": {"id": application.id, "resumeToken": token},
    }), 201


@bp.get("/api/applications/draft/resume")
def resume_draft():
    token = request.args.get("token") or request.headers.get("X-Resume-Token")
    application = intake_service().resume_draft(token)
    return jsonify({"application": application_to_dict(application)})


@bp.get("/api/applications/assigned")
@login_required
def my_assignments():
    rows = reviewer_service().list_for_reviewer(current_user.id)
    assignments = []
    for assignment, application in rows:
        data = assignment_to_dict(assignment)
        data.pop("reviewer_name", None)
        data["team_name"] = application.team_name if application else None
        data["application_status"] = application.status if application else None
        assignments.append(data)
    return jsonify({"assignments": assignments})


@bp.get("/api/applications/<application_id>")
@uuid_args("application_id")
def get_application(application_id):
    application = intake_service().get_application(application_id)
    return jsonify({"application": application_to_dict(application)})


@bp.patch("/api/applications/<application_id>/status")
@manager_required
@uuid_args("application_id")
def set_decision(application_id):
    body = json_body()
    outcome = intake_service().set_decision(application_id, body.get("status"))
    commit(outcome)
    application = outcome.value
    return jsonify({
        "message": "Application status updated",
        "data": {"id": application.id, "status": application.status},
    })


@bp.post("/api/applications/<application_id>/invite-reviewer")
@manager_required
@uuid_args("application_id")
def invite_reviewer(application_id):
    body = json_body()
    reviewer_id = body.get("reviewerId")
    if not reviewer_id or not is_uuid(reviewer_id):
        raise InvalidInput("reviewerId must be a valid UUID")
    outcome = reviewer_service().invite_reviewer(application_id, reviewer_id, manager_id=current_user.id)
    commit(outcome)
    return jsonify({
        "message": "Reviewer invited successfully",
        "assignment": assignment_to_dict(outcome.value),
    }), 201


@bp.get("/api/applications/<application_id>/reviewers")
@manager_required
@uuid_args("application_id")
def list_reviewers(application_id):
    rows = reviewer_service().list_assignments(application_id)
    return jsonify({"reviewers": [assignment_to_dict(row, name) for row, name in rows]})


@bp.delete("/api/applications/<application_id>/reviewers/<reviewer_id>")
@manager_required
@uuid_args("application_id", "reviewer_id")
def remove_reviewer(application_id, reviewer_id):
    outcome = reviewer_service().remove_reviewer(application_id, reviewer_id)
    commit(outcome)
    return jsonify({"message": "Reviewer removed"})


@bp.post("/api/applications/<application_id>/reviewer-respond")
@login_required
@uuid_args("application_id")
def reviewer_respond(application_id):
    body = json_body()
    accept = body.get("accept")
    if not isinstance(accept, bool):
        raise InvalidInput("accept must be true or false")
    policy().require(Capability.IS_ASSIGNED_REVIEWER, actor_id=current_user.id, application_id=application_id)
    outcome = reviewer_service().respond_to_invite(application_id, current_user.id, accept)
    commit(outcome)
    return jsonify({
        "message": "You have accepted the assignment" if accept else "You have declined the assignment",
        "accepted": accept,
    })
