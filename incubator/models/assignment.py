from ..extensions import db
from .base import UUIDPrimaryKeyMixin

INVITE_STATUSES = ("pending", "accepted", "rejected")
MAX_REVIEWERS_PER_APPLICATION = 5


class ReviewerAssignment(db.Model, UUIDPrimaryKeyMixin):
    __tablename__ = "application_reviewers"

    application_id = db.Column(db.String(36), db.ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = db.Column(db.String(36), db.ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    invite_status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    invited_at = db.Column(db.DateTime, nullable=False)
    responded_at = db.Column(db.DateTime)
    assigned_by = db.Column(db.String(36), db.ForeignKey("user_profiles.id", ondelete="SET NULL"))

    __table_args__ = (
        db.UniqueConstraint("application_id", "reviewer_id", name="uq_application_reviewer"),
        db.CheckConstraint(f"invite_status IN {INVITE_STATUSES!r}", name="ck_application_reviewers_invite_status"),
    )

    def __repr__(self) -> str:
        return f"<ReviewerAssignment app={self.application_id} reviewer={self.reviewer_id} status={self.invite_status}>"
