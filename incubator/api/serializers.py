"""Row -> JSON helpers shared by the API blueprints."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import inspect

from ..models.evaluation import CRITERIA

# never leave the server
HIDDEN_COLUMNS = {"resume_token_hash", "resume_token_expiry", "password_hash", "auth_token_hash",
                  "auth_token_expires_at"}


def _value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def row_to_dict(obj, exclude=()):
    out = {}
    for attr in inspect(obj).mapper.column_attrs:
        if attr.key in HIDDEN_COLUMNS or attr.key in exclude:
            continue
        out[attr.key] = _value(getattr(obj, attr.key))
    return out


def application_to_dict(application, reviewers=None):
    data = row_to_dict(application)
    if reviewers is not None:
        data["reviewers"] = reviewers
    return data


def evaluation_to_dict(evaluation, reviewer_name=None):
    data = row_to_dict(evaluation)
    data["total_score"] = float(evaluation.total_score)
    if reviewer_name is not None:
        data["reviewer_name"] = reviewer_name
    return data


def assignment_to_dict(assignment, reviewer_name=None):
    data = row_to_dict(assignment)
    data["reviewer_name"] = reviewer_name
    return data


def user_to_dict(user):
    return row_to_dict(user)


def camel(name):
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# request key (camelCase) -> column, for evaluation bodies
SCORE_KEYS = {camel(score): score for score, _ in CRITERIA}
COMMENT_KEYS = {camel(comment): comment for _, comment in CRITERIA}
COMMENT_KEYS["overallComment"] = "overall_comment"


def evaluation_input(body):
    """Split a request body into ``(scores, comments)`` keyed by column.

    Only keys present in the body are included.
    """
    scores = {col: body[key] for key, col in SCORE_KEYS.items() if key in body}
    comments = {col: body[key] for key, col in COMMENT_KEYS.items() if key in body}
    return scores, comments
