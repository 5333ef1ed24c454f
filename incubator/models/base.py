from uuid import uuid4

from ..extensions import db


def new_id():
    return str(uuid4())


class UUIDPrimaryKeyMixin:
    id = db.Column(db.String(36), primary_key=True, default=new_id)


class TimestampMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
