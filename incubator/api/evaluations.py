from flask import Blueprint, jsonify

from ..errors import InvalidInput
from ..services import evaluation_service
from ..utils.decorators import is_uuid, manager_required, reviewer_id_header, uuid_args
from .common import commit, json_body
from .serializers import evaluation_input, evaluation_to_dict

bp = Blueprint("evaluations", __name__)


@bp.post("/api/evaluations")
def create_evaluation():
    reviewer_id = reviewer_id_header()
    body = json_body()
    application_id = body.get("applicationId")
    if not application_id or not is_uuid(application_id):
        raise InvalidInput("applicationId must be a valid UUID")
    scores, comments = evaluation_input(body)
    outcome = evaluation_service().create_evaluation(application_id, reviewer_id, scores, comments)
    commit(outcome)
    return jsonify({
        "message": "Evaluation created successfully",
        "evaluation": evaluation_to_dict(outcome.value),
    }), 201


@bp.put("/api/evaluations/application/<application_id>")
@uuid_args("application_id")
def submit_or_update_evaluation(application_id):
    reviewer_id = reviewer_id_header()
    scores, comments = evaluation_input(json_body())
    outcome = evaluation_service().submit_or_update_evaluation(application_id, reviewer_id, scores, comments)
    commit(outcome)
    evaluation, created = outcome.value
    return jsonify({
        "message": "Evaluation created successfully" if created else "Evaluation updated successfully",
        "evaluation": evaluation_to_dict(evaluation),
    }), 201 if created else 200


@bp.put("/api/evaluations/<evaluation_id>")
@uuid_args("evaluation_id")
def update_evaluation(evaluation_id):
    reviewer_id = reviewer_id_header()
    scores, comments = evaluation_input(json_body())
    if not scores and not comments:
        raise InvalidInput("No fields to update")
    outcome = evaluation_service().update_evaluation(evaluation_id, reviewer_id, scores, comments)
    commit(outcome)
    return jsonify({
        "message": "Evaluation updated successfully",
        "evaluation": evaluation_to_dict(outcome.value),
    })


@bp.get("/api/evaluations/application/<application_id>")
@uuid_args("application_id")
def own_evaluation(application_id):
    reviewer_id = reviewer_id_header()
    evaluation = evaluation_service().get_own_evaluation(application_id, reviewer_id)
    return jsonify({"evaluation": evaluation_to_dict(evaluation) if evaluation else None})


@bp.get("/api/evaluations/application/<application_id>/all")
@manager_required
@uuid_args("application_id")
def all_evaluations(application_id):
    rows = evaluation_service().list_evaluations(application_id)
    return jsonify({"evaluations": [evaluation_to_dict(row, name or "Unknown") for row, name in rows]})
