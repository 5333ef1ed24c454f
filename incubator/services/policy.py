"""Capability checks run before every mutating operation."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import Forbidden, NotFound, Unauthorized


class Capability(str, Enum):
    IS_MANAGER = "is_manager"
    IS_ASSIGNED_REVIEWER = "is_assigned_reviewer"
    IS_ACCEPTED_REVIEWER = "is_accepted_reviewer"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    error_kind: Optional[str] = None  # "unauthorized" | "forbidden" | "not_found"
    reason: Optional[str] = None

    @classmethod
    def allow(cls):
        return cls(True)

    @classmethod
    def unauthorized(cls, reason):
        return cls(False, "unauthorized", reason)

    @classmethod
    def forbidden(cls, reason):
        return cls(False, "forbidden", reason)

    @classmethod
    def not_found(cls, reason):
        return cls(False, "not_found", reason)

    def enforce(self):
        if self.allowed:
            return self
        if self.error_kind == "unauthorized":
            raise Unauthorized(self.reason)
        if self.error_kind == "not_found":
            raise NotFound(self.reason)
        raise Forbidden(self.reason)


class Policy:
    def __init__(self, assignments):
        self.assignments = assignments

    def check(self, capability, actor_id=None, role=None, application_id=None) -> Decision:
        if not actor_id:
            return Decision.unauthorized("Authentication required")

        if capability == Capability.IS_MANAGER:
            if role != "manager":
                return Decision.forbidden("Manager role required")
            return Decision.allow()

        assignment = self.assignments.get(application_id, actor_id)
        if assignment is None:
            if capability == Capability.IS_ASSIGNED_REVIEWER:
                # answering an invitation that was never sent
                return Decision.not_found("No invitation found for this reviewer and application")
            return Decision.forbidden("You are not assigned to review this application")
        if capability == Capability.IS_ASSIGNED_REVIEWER:
            return Decision.allow()

        # IS_ACCEPTED_REVIEWER
        if assignment.invite_status == "rejected":
            return Decision.forbidden("You have declined this assignment")
        if assignment.invite_status != "accepted":
            return Decision.forbidden("Please accept the reviewer assignment before submitting an evaluation")
        return Decision.allow()

    def require(self, capability, actor_id=None, role=None, application_id=None):
        return self.check(capability, actor_id=actor_id, role=role, application_id=application_id).enforce()
