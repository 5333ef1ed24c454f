import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from incubator import create_app
from incubator.extensions import db
from incubator.models import UserProfile
from incubator.services import user_service


@pytest.fixture
def app():
    # no context stays pushed: each test request must get its own `g`
    app = create_app("config.TestConfig")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Create a user and return ``(id, bearer headers)``."""
    def _make(role="reviewer", name=None, email=None, password="password123"):
        with app.app_context():
            email = email or f"{role}-{UserProfile.query.count()}@example.com"
            user = UserProfile(email_address=email, full_name=name or role.title(), role=role)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            user_id = user.id
            _, token = user_service().issue_token(email, password)
            db.session.commit()
        return user_id, {"Authorization": f"Bearer {token}"}
    return _make
