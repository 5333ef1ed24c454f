from flask import Blueprint, jsonify
from flask_login import current_user

from ..services import user_service
from ..utils.decorators import login_required
from .common import commit, json_body
from .serializers import user_to_dict

bp = Blueprint("auth", __name__)


@bp.post("/api/auth/token")
def issue_token():
    body = json_body()
    user, token = user_service().issue_token(body.get("email"), body.get("password"))
    commit()
    return jsonify({
        "token": token,
        "expiresAt": user.auth_token_expires_at.isoformat(),
        "user": user_to_dict(user),
    })


@bp.get("/api/auth/me")
@login_required
def me():
    return jsonify({"user": user_to_dict(current_user._get_current_object())})
