from ..extensions import db
from flask_login import UserMixin
from .base import TimestampMixin, UUIDPrimaryKeyMixin
from werkzeug.security import generate_password_hash, check_password_hash

ROLES = ("manager", "reviewer", "startup")


class UserProfile(db.Model, UUIDPrimaryKeyMixin, UserMixin, TimestampMixin):
    __tablename__ = "user_profiles"
    email_address = db.Column(db.String(255), unique=True, nullable=False)
    full_name = db.Column(db.String(200))
    role = db.Column(db.String(20), nullable=False, default="startup", index=True)
    password_hash = db.Column(db.String(255))
    auth_token_hash = db.Column(db.String(64), unique=True, index=True)
    auth_token_expires_at = db.Column(db.DateTime)

    __table_args__ = (
        db.CheckConstraint(f"role IN {ROLES!r}", name="ck_user_profiles_role"),
    )

    def set_password(self, raw):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, raw)
