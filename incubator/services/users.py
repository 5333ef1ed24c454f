"""User administration and bearer-token login."""
import logging
import re
import secrets
import string
from datetime import timedelta

from ..errors import Conflict, InvalidInput, NotFound, Unauthorized
from ..models import UserProfile
from ..utils.clock import utcnow
from ..utils.tokens import hash_token, new_token
from .events import Outcome, UserWelcome

log = logging.getLogger(__name__)

ASSIGNABLE_ROLES = ("manager", "reviewer")
MIN_PASSWORD_LENGTH = 8
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_SYMBOLS = "!@#$%^&*"


def generate_password(length=12):
    """Random password with at least one upper, lower, digit and symbol."""
    rng = secrets.SystemRandom()
    chars = [
        rng.choice(string.ascii_uppercase),
        rng.choice(string.ascii_lowercase),
        rng.choice(string.digits),
        rng.choice(_SYMBOLS),
    ]
    pool = string.ascii_letters + string.digits + _SYMBOLS
    chars += [rng.choice(pool) for _ in range(length - len(chars))]
    rng.shuffle(chars)
    return "".join(chars)


class UserService:
    def __init__(self, users, clock=utcnow, token_ttl_hours=168):
        self.users = users
        self.clock = clock
        self.token_ttl_hours = token_ttl_hours

    def create_user(self, email, full_name, role):
        if not all(isinstance(v, str) and v.strip() for v in (email, full_name, role)):
            raise InvalidInput("Missing required fields: email, fullName, and role are required")
        email = email.strip()
        if not EMAIL_RE.match(email):
            raise InvalidInput("Invalid email format")
        if role not in ASSIGNABLE_ROLES:
            raise InvalidInput("Invalid role. Must be 'manager' or 'reviewer'")
        if self.users.get_by_email(email) is not None:
            raise Conflict("A user with this email already exists")

        password = generate_password()
        user = UserProfile(email_address=email, full_name=full_name.strip(), role=role)
        user.set_password(password)
        self.users.add(user)
        log.info("created %s account %s", role, user.id)
        return Outcome((user, password), [UserWelcome(user_id=user.id, password=password)])

    def list_users(self):
        return self.users.list()

    def get_user(self, user_id):
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_user(self, user_id, full_name=None, role=None):
        user = self.get_user(user_id)
        if role is not None:
            if role not in ASSIGNABLE_ROLES:
                raise InvalidInput("Invalid role. Must be 'manager' or 'reviewer'")
            user.role = role
        if full_name is not None:
            if not str(full_name).strip():
                raise InvalidInput("fullName cannot be empty")
            user.full_name = str(full_name).strip()
        self.users.save(user)
        return user

    def delete_user(self, user_id):
        user = self.get_user(user_id)
        self.users.delete(user)
        log.info("deleted user %s", user_id)

    def change_password(self, user_id, new_password):
        if not user_id or not isinstance(new_password, str) or not new_password:
            raise InvalidInput("Missing required fields: userId and newPassword are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        user = self.get_user(user_id)
        user.set_password(new_password)
        # existing sessions end with the old password
        user.auth_token_hash = None
        user.auth_token_expires_at = None
        self.users.save(user)

    def issue_token(self, email, password):
        user = self.users.get_by_email(email.strip()) if isinstance(email, str) and email.strip() else None
        if user is None or not isinstance(password, str) or not user.check_password(password):
            raise Unauthorized("Invalid email or password")
        token = new_token()
        user.auth_token_hash = hash_token(token)
        user.auth_token_expires_at = self.clock() + timedelta(hours=self.token_ttl_hours)
        self.users.save(user)
        return user, token

    def resolve_token(self, token):
        if not token:
            return None
        user = self.users.get_by_token_hash(hash_token(token))
        if user is None or user.auth_token_expires_at is None or user.auth_token_expires_at < self.clock():
            return None
        return user
