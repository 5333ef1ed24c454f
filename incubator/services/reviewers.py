"""Reviewer invitation lifecycle.

Each (application, reviewer) pair moves pending -> accepted | rejected, the
latter either by the reviewer declining or by the expiry sweep. Once two
reviewers have accepted, a pending application moves to under_review.
"""
import logging
from datetime import timedelta

from ..errors import Conflict, InvalidState, NotFound
from ..models import ReviewerAssignment
from ..models.assignment import MAX_REVIEWERS_PER_APPLICATION
from ..utils.clock import utcnow
from .events import InviteExpired, Outcome, ReviewerInvited, ReviewerResponded

log = logging.getLogger(__name__)

ACCEPTANCE_QUORUM = 2
INVITE_EXPIRE_DAYS = 2


class ReviewerAssignmentService:
    def __init__(self, applications, assignments, users, clock=utcnow):
        self.applications = applications
        self.assignments = assignments
        self.users = users
        self.clock = clock

    def invite_reviewer(self, application_id, reviewer_id, manager_id=None):
        application = self.applications.get_for_update(application_id)
        if application is None:
            raise NotFound("Application not found")
        if application.status != "pending":
            raise InvalidState("Reviewer can only be invited for applications in pending status")

        reviewer = self.users.get(reviewer_id)
        if reviewer is None or reviewer.role != "reviewer":
            raise NotFound("Reviewer not found or not a reviewer")

        if self.assignments.get(application_id, reviewer_id) is not None:
            raise Conflict("This reviewer is already assigned to this application")
        if self.assignments.count_for_application(application_id) >= MAX_REVIEWERS_PER_APPLICATION:
            raise Conflict(f"Maximum of {MAX_REVIEWERS_PER_APPLICATION} reviewers allowed per application")

        assignment = ReviewerAssignment(
            application_id=application_id,
            reviewer_id=reviewer_id,
            invite_status="pending",
            invited_at=self.clock(),
            responded_at=None,
            assigned_by=manager_id,
        )
        self.assignments.add(assignment)
        log.info("reviewer %s invited to application %s", reviewer_id, application_id)
        return Outcome(assignment, [ReviewerInvited(application_id=application_id, reviewer_id=reviewer_id)])

    def respond_to_invite(self, application_id, reviewer_id, accept):
        assignment = self.assignments.get(application_id, reviewer_id)
        if assignment is None:
            raise NotFound("No invitation found for this reviewer and application")

        wanted = "accepted" if accept else "rejected"
        if assignment.invite_status == wanted:
            # repeated answer: nothing changes, nobody is notified twice
            return Outcome(assignment, [])
        if assignment.invite_status != "pending":
            raise NotFound("No pending invitation for this reviewer and application")

        assignment.invite_status = wanted
        assignment.responded_at = self.clock()
        self.assignments.save(assignment)

        if accept:
            self._advance_if_quorum(application_id)

        log.info("reviewer %s %s application %s", reviewer_id, wanted, application_id)
        event = ReviewerResponded(application_id=application_id, reviewer_id=reviewer_id, accepted=bool(accept))
        return Outcome(assignment, [event])

    def _advance_if_quorum(self, application_id):
        application = self.applications.get(application_id)
        if application is None or application.status != "pending":
            return
        if self.assignments.count_accepted(application_id) >= ACCEPTANCE_QUORUM:
            application.status = "under_review"
            self.applications.save(application)
            log.info("application %s moved to under_review", application_id)

    def expire_pending_invites(self, cutoff_days=INVITE_EXPIRE_DAYS, now=None):
        """Auto-reject invites left pending for more than ``cutoff_days``.

        Returns an Outcome whose value is the number of invites expired.
        """
        now = now or self.clock()
        cutoff = now - timedelta(days=cutoff_days)
        expired = self.assignments.expire_pending(cutoff, now)
        if expired:
            log.info("auto-rejected %d pending reviewer invite(s) older than %d days", len(expired), cutoff_days)
        events = [
            InviteExpired(application_id=row.application_id, reviewer_id=row.reviewer_id, expire_days=cutoff_days)
            for row in expired
        ]
        return Outcome(len(expired), events)

    def remove_reviewer(self, application_id, reviewer_id):
        assignment = self.assignments.get(application_id, reviewer_id)
        if assignment is None:
            raise NotFound("Reviewer is not assigned to this application")
        self.assignments.delete(assignment)
        log.info("reviewer %s removed from application %s", reviewer_id, application_id)
        return Outcome(assignment, [])

    def list_assignments(self, application_id):
        if self.applications.get(application_id) is None:
            raise NotFound("Application not found")
        rows = self.assignments.list_for_application(application_id)
        names = self.users.display_names([r.reviewer_id for r in rows])
        return [(row, names.get(row.reviewer_id)) for row in rows]

    def list_for_reviewer(self, reviewer_id):
        out = []
        for row in self.assignments.list_for_reviewer(reviewer_id):
            application = self.applications.get(row.application_id)
            out.append((row, application))
        return out
