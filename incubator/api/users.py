from flask import Blueprint, jsonify
from flask_login import current_user

from ..errors import Forbidden
from ..services import user_service
from ..utils.decorators import login_required, manager_required, uuid_args
from .common import commit, json_body
from .serializers import user_to_dict

bp = Blueprint("users", __name__)


@bp.post("/api/users")
@manager_required
def create_user():
    body = json_body()
    outcome = user_service().create_user(body.get("email"), body.get("fullName"), body.get("role"))
    commit(outcome)
    user, password = outcome.value
    return jsonify({
        "message": "User created successfully",
        "data": {
            "id": user.id,
            "email": user.email_address,
            "fullName": user.full_name,
            "role": user.role,
            # returned once so the manager can share it if the welcome mail fails
            "password": password,
        },
    }), 201


@bp.get("/api/users")
@manager_required
def list_users():
    return jsonify({"users": [user_to_dict(u) for u in user_service().list_users()]})


# registered before /<user_id> so the literal path wins for PUT
@bp.put("/api/users/change-password")
@login_required
def change_password():
    body = json_body()
    user_id = body.get("userId") or current_user.id
    if user_id != current_user.id and current_user.role != "manager":
        raise Forbidden("You can only change your own password")
    user_service().change_password(user_id, body.get("newPassword"))
    commit()
    return jsonify({"message": "Password updated successfully"})


@bp.put("/api/users/<user_id>")
@manager_required
@uuid_args("user_id")
def update_user(user_id):
    body = json_body()
    user = user_service().update_user(user_id, full_name=body.get("fullName"), role=body.get("role"))
    commit()
    return jsonify({"message": "User updated successfully", "user": user_to_dict(user)})


@bp.delete("/api/users/<user_id>")
@manager_required
@uuid_args("user_id")
def delete_user(user_id):
    if user_id == current_user.id:
        raise Forbidden("You cannot delete your own account")
    user_service().delete_user(user_id)
    commit()
    return jsonify({"message": "User deleted successfully"})
