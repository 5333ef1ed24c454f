"""Services bound to the SQL repositories and the current app config."""
from flask import current_app

from ..repositories import (SqlApplicationRepository, SqlAssignmentRepository, SqlEvaluationRepository,
                            SqlUserRepository)
from .evaluations import EvaluationService
from .intake import IntakeService
from .policy import Policy
from .reviewers import ReviewerAssignmentService
from .users import UserService


def policy():
    return Policy(SqlAssignmentRepository())


def reviewer_service():
    return ReviewerAssignmentService(SqlApplicationRepository(), SqlAssignmentRepository(), SqlUserRepository())


def evaluation_service():
    assignments = SqlAssignmentRepository()
    return EvaluationService(SqlApplicationRepository(), assignments, SqlEvaluationRepository(),
                             SqlUserRepository(), Policy(assignments))


def intake_service():
    return IntakeService(SqlApplicationRepository(), SqlAssignmentRepository(), SqlUserRepository())


def user_service():
    ttl = current_app.config.get("AUTH_TOKEN_TTL_HOURS", 168)
    return UserService(SqlUserRepository(), token_ttl_hours=ttl)
