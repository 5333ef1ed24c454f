"""Per-entity data access.

The services only talk to the abstract repositories below. The SQLAlchemy
implementations flush but never commit: the request (or job) that drives a
service owns the transaction and commits once at the end.
"""
from abc import ABC, abstractmethod

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError

from .errors import Conflict
from .extensions import db
from .models import Application, Evaluation, ReviewerAssignment, UserProfile
from .models.assignment import MAX_REVIEWERS_PER_APPLICATION


class ApplicationRepository(ABC):

    @abstractmethod
    def get(self, application_id):
        pass

    @abstractmethod
    def get_for_update(self, application_id):
        """Like ``get``, but locks the row until the transaction ends."""

    @abstractmethod
    def add(self, application):
        pass

    @abstractmethod
    def save(self, application):
        pass

    @abstractmethod
    def find_draft_by_token_hash(self, token_hash):
        pass

    @abstractmethod
    def list(self, status=None, limit=50, offset=0):
        pass

    @abstractmethod
    def count(self, status=None):
        pass


class AssignmentRepository(ABC):

    @abstractmethod
    def get(self, application_id, reviewer_id):
        pass

    @abstractmethod
    def add(self, assignment):
        pass

    @abstractmethod
    def save(self, assignment):
        pass

    @abstractmethod
    def delete(self, assignment):
        pass

    @abstractmethod
    def count_for_application(self, application_id):
        pass

    @abstractmethod
    def count_accepted(self, application_id):
        pass

    @abstractmethod
    def list_for_application(self, application_id):
        pass

    @abstractmethod
    def list_for_applications(self, application_ids):
        pass

    @abstractmethod
    def list_for_reviewer(self, reviewer_id):
        pass

    @abstractmethod
    def expire_pending(self, cutoff, now):
        """Flip pending invites sent before ``cutoff`` to rejected.

        Returns the assignments actually transitioned by this call.
        """


class EvaluationRepository(ABC):

    @abstractmethod
    def get(self, evaluation_id):
        pass

    @abstractmethod
    def get_for_reviewer(self, application_id, reviewer_id):
        pass

    @abstractmethod
    def add(self, evaluation):
        pass

    @abstractmethod
    def save(self, evaluation):
        pass

    @abstractmethod
    def list_for_application(self, application_id):
        pass

    @abstractmethod
    def count_distinct_reviewers(self, application_id):
        pass


class UserRepository(ABC):

    @abstractmethod
    def get(self, user_id):
        pass

    @abstractmethod
    def get_by_email(self, email):
        pass

    @abstractmethod
    def get_by_token_hash(self, token_hash):
        pass

    @abstractmethod
    def list(self, role=None):
        pass

    @abstractmethod
    def add(self, user):
        pass

    @abstractmethod
    def save(self, user):
        pass

    @abstractmethod
    def delete(self, user):
        pass

    def display_names(self, user_ids):
        names = {}
        for uid in set(user_ids):
            user = self.get(uid)
            if user:
                names[uid] = user.full_name
        return names


def _flush(conflict_message=None):
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        if conflict_message:
            raise Conflict(conflict_message)
        raise


class SqlApplicationRepository(ApplicationRepository):

    def get(self, application_id):
        return db.session.get(Application, application_id)

    def get_for_update(self, application_id):
        return Application.query.filter_by(id=application_id).with_for_update().first()

    def add(self, application):
        db.session.add(application)
        _flush()
        return application

    def save(self, application):
        db.session.add(application)
        _flush()
        return application

    def find_draft_by_token_hash(self, token_hash):
        return Application.query.filter_by(resume_token_hash=token_hash, status="draft").first()

    def _filtered(self, status):
        # drafts are listed only when asked for by name
        if status:
            return Application.query.filter(Application.status == status)
        return Application.query.filter(Application.status != "draft")

    def list(self, status=None, limit=50, offset=0):
        return (
            self._filtered(status)
            .order_by(Application.submitted_at.desc(), Application.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count(self, status=None):
        return self._filtered(status).count()


class SqlAssignmentRepository(AssignmentRepository):

    def get(self, application_id, reviewer_id):
        return ReviewerAssignment.query.filter_by(application_id=application_id, reviewer_id=reviewer_id).first()

    def add(self, assignment):
        db.session.add(assignment)
        _flush("This reviewer is already assigned to this application")
        if self.count_for_application(assignment.application_id) > MAX_REVIEWERS_PER_APPLICATION:
            db.session.rollback()
            raise Conflict(f"Maximum of {MAX_REVIEWERS_PER_APPLICATION} reviewers allowed per application")
        return assignment

    def save(self, assignment):
        db.session.add(assignment)
        _flush()
        return assignment

    def delete(self, assignment):
        db.session.delete(assignment)
        _flush()

    def count_for_application(self, application_id):
        return ReviewerAssignment.query.filter_by(application_id=application_id).count()

    def count_accepted(self, application_id):
        return ReviewerAssignment.query.filter_by(application_id=application_id, invite_status="accepted").count()

    def list_for_application(self, application_id):
        return (
            ReviewerAssignment.query.filter_by(application_id=application_id)
            .order_by(ReviewerAssignment.invited_at.asc())
            .all()
        )

    def list_for_applications(self, application_ids):
        if not application_ids:
            return []
        return ReviewerAssignment.query.filter(ReviewerAssignment.application_id.in_(list(application_ids))).all()

    def list_for_reviewer(self, reviewer_id):
        return (
            ReviewerAssignment.query.filter_by(reviewer_id=reviewer_id)
            .order_by(ReviewerAssignment.invited_at.desc())
            .all()
        )

    def expire_pending(self, cutoff, now):
        candidates = (
            ReviewerAssignment.query
            .filter(ReviewerAssignment.invite_status == "pending", ReviewerAssignment.invited_at < cutoff)
            .all()
        )
        expired = []
        for row in candidates:
            # conditional per-row update: a concurrent response or sweep wins
            result = db.session.execute(
                update(ReviewerAssignment)
                .where(ReviewerAssignment.id == row.id, ReviewerAssignment.invite_status == "pending")
                .values(invite_status="rejected", responded_at=now)
            )
            if result.rowcount == 1:
                expired.append(row)
        return expired


class SqlEvaluationRepository(EvaluationRepository):

    def get(self, evaluation_id):
        return db.session.get(Evaluation, evaluation_id)

    def get_for_reviewer(self, application_id, reviewer_id):
        return Evaluation.query.filter_by(application_id=application_id, reviewer_id=reviewer_id).first()

    def add(self, evaluation):
        db.session.add(evaluation)
        _flush("Evaluation already exists for this application. Use PUT to update it.")
        return evaluation

    def save(self, evaluation):
        db.session.add(evaluation)
        _flush()
        return evaluation

    def list_for_application(self, application_id):
        return (
            Evaluation.query.filter_by(application_id=application_id)
            .order_by(Evaluation.created_at.desc())
            .all()
        )

    def count_distinct_reviewers(self, application_id):
        return (
            db.session.query(func.count(func.distinct(Evaluation.reviewer_id)))
            .filter(Evaluation.application_id == application_id)
            .scalar()
        ) or 0


class SqlUserRepository(UserRepository):

    def get(self, user_id):
        return db.session.get(UserProfile, user_id)

    def get_by_email(self, email):
        return UserProfile.query.filter(func.lower(UserProfile.email_address) == email.lower()).first()

    def get_by_token_hash(self, token_hash):
        return UserProfile.query.filter_by(auth_token_hash=token_hash).first()

    def list(self, role=None):
        query = UserProfile.query
        if role:
            query = query.filter_by(role=role)
        return query.order_by(UserProfile.created_at.desc()).all()

    def add(self, user):
        db.session.add(user)
        _flush("A user with this email already exists")
        return user

    def save(self, user):
        db.session.add(user)
        _flush()
        return user

    def delete(self, user):
        db.session.delete(user)
        _flush()

    def display_names(self, user_ids):
        ids = list(set(user_ids))
        if not ids:
            return {}
        rows = UserProfile.query.filter(UserProfile.id.in_(ids)).all()
        return {u.id: u.full_name for u in rows}
