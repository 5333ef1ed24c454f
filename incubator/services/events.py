"""Notification events emitted by the core operations.

Operations never send mail themselves. They return the events describing
what should be announced, and the dispatcher turns each one into a
background delivery job.
"""
from dataclasses import asdict, dataclass, field
from typing import Any, List


@dataclass
class Event:
    kind = "event"
    # payload carries a credential: never store the rendered body, drop the job quickly
    secret = False

    def to_payload(self) -> dict:
        payload = asdict(self)
        payload["kind"] = self.kind
        return payload


@dataclass
class ReviewerInvited(Event):
    kind = "reviewer_invited"
    application_id: str
    reviewer_id: str


@dataclass
class ReviewerResponded(Event):
    kind = "reviewer_responded"
    application_id: str
    reviewer_id: str
    accepted: bool


@dataclass
class InviteExpired(Event):
    kind = "invite_expired"
    application_id: str
    reviewer_id: str
    expire_days: int = 2


@dataclass
class DraftResumeLink(Event):
    kind = "draft_resume_link"
    secret = True
    application_id: str
    email: str
    token: str


@dataclass
class UserWelcome(Event):
    kind = "user_welcome"
    secret = True
    user_id: str
    password: str


EVENT_TYPES = {cls.kind: cls for cls in (ReviewerInvited, ReviewerResponded, InviteExpired, DraftResumeLink, UserWelcome)}


def event_from_payload(payload: dict) -> Event:
    data = dict(payload)
    kind = data.pop("kind", None)
    cls = EVENT_TYPES.get(kind)
    if cls is None:
        raise ValueError(f"unknown event kind: {kind!r}")
    return cls(**data)


@dataclass
class Outcome:
    """Result of a core operation plus the events it wants announced."""
    value: Any = None
    events: List[Event] = field(default_factory=list)
