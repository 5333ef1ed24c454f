from ..extensions import db
from .base import TimestampMixin


class Notification(db.Model, TimestampMixin):
    __tablename__ = "notifications"
    id = db.Column(db.Integer, primary_key=True)
    application_id = db.Column(db.String(36), db.ForeignKey("applications.id", ondelete="SET NULL"), nullable=True)
    type = db.Column(db.String(50))  # event kind, e.g. reviewer_invited
    sent_to = db.Column(db.String(1024))
    subject = db.Column(db.String(255))
    body = db.Column(db.Text)
    provider_message_id = db.Column(db.String(255))
    sent_at = db.Column(db.DateTime)
