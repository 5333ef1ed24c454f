from flask import request

from ..errors import InvalidInput
from ..extensions import db
from ..services.dispatch import dispatch


def json_body():
    body = request.get_json(silent=True)
    if body is None and request.form:
        body = request.form.to_dict()
    if not isinstance(body, dict):
        raise InvalidInput("Request body must be a JSON object")
    return body


def commit(outcome=None):
    """Commit the request's work, then hand any events to the dispatcher."""
    db.session.commit()
    if outcome is not None:
        dispatch(outcome.events)
    return outcome
