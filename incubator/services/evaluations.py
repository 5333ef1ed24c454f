"""Reviewer evaluations and review-cycle completion."""
import logging
from decimal import Decimal, InvalidOperation

from ..errors import Conflict, InvalidInput, NotFound
from ..models import Evaluation
from ..models.evaluation import CRITERIA
from .events import Outcome
from .policy import Capability

log = logging.getLogger(__name__)

SCORE_FIELDS = tuple(score for score, _ in CRITERIA)
COMMENT_FIELDS = tuple(comment for _, comment in CRITERIA) + ("overall_comment",)

MIN_SCORE = Decimal("0")
MAX_SCORE = Decimal("10")
MAX_DECIMALS = 2

# statuses the completion check may move to 'evaluated'
OPEN_STATUSES = ("pending", "under_review")


def parse_score(value, name):
    """Return ``value`` as a Decimal, or raise InvalidInput.

    Accepts ints, floats, Decimals and numeric strings in [0, 10] with at
    most two decimal places. Nothing is clamped or rounded.
    """
    if value is None or isinstance(value, bool):
        raise InvalidInput(f"Score field cannot be empty: {name}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise InvalidInput(f"Score field cannot be empty: {name}")
    try:
        number = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInput(f"{name} must be a number between 0 and 10")
    if not number.is_finite():
        raise InvalidInput(f"{name} must be a number between 0 and 10")
    if number < MIN_SCORE or number > MAX_SCORE:
        raise InvalidInput(f"{name} must be between 0 and 10 (inclusive)")
    if number.as_tuple().exponent < -MAX_DECIMALS:
        raise InvalidInput("Scores can have at most 2 decimal places")
    return number


def validate_scores(scores, partial=False):
    scores = scores or {}
    out = {}
    for name in SCORE_FIELDS:
        if name not in scores:
            if partial:
                continue
            raise InvalidInput(f"Score field cannot be empty: {name}")
        out[name] = parse_score(scores[name], name)
    return out


def clean_comments(comments, partial=False):
    comments = comments or {}
    out = {}
    for name in COMMENT_FIELDS:
        if name not in comments:
            if not partial:
                out[name] = None
            continue
        value = comments[name]
        if value is not None and not isinstance(value, str):
            raise InvalidInput(f"{name} must be text")
        out[name] = value if value else None
    return out


class EvaluationService:
    def __init__(self, applications, assignments, evaluations, users, policy):
        self.applications = applications
        self.assignments = assignments
        self.evaluations = evaluations
        self.users = users
        self.policy = policy

    def submit_or_update_evaluation(self, application_id, reviewer_id, scores, comments=None):
        """Create the reviewer's evaluation, or overwrite the existing one.

        Returns an Outcome whose value is ``(evaluation, created)``.
        """
        values = validate_scores(scores)
        notes = clean_comments(comments)
        self.policy.require(Capability.IS_ACCEPTED_REVIEWER, actor_id=reviewer_id, application_id=application_id)

        evaluation = self.evaluations.get_for_reviewer(application_id, reviewer_id)
        created = evaluation is None
        if created:
            evaluation = Evaluation(application_id=application_id, reviewer_id=reviewer_id, **values, **notes)
            self.evaluations.add(evaluation)
        else:
            _apply(evaluation, values, notes)
            self.evaluations.save(evaluation)

        self.check_completion(application_id)
        return Outcome((evaluation, created))

    def create_evaluation(self, application_id, reviewer_id, scores, comments=None):
        values = validate_scores(scores)
        notes = clean_comments(comments)
        self.policy.require(Capability.IS_ACCEPTED_REVIEWER, actor_id=reviewer_id, application_id=application_id)

        # a concurrent insert that slips past this check hits the unique
        # constraint, which the repository reports as Conflict too
        if self.evaluations.get_for_reviewer(application_id, reviewer_id) is not None:
            raise Conflict("Evaluation already exists for this application. Use PUT to update it.")

        evaluation = Evaluation(application_id=application_id, reviewer_id=reviewer_id, **values, **notes)
        self.evaluations.add(evaluation)
        self.check_completion(application_id)
        return Outcome(evaluation)

    def update_evaluation(self, evaluation_id, reviewer_id, scores=None, comments=None):
        values = validate_scores(scores, partial=True)
        notes = clean_comments(comments, partial=True)

        evaluation = self.evaluations.get(evaluation_id)
        if evaluation is None or evaluation.reviewer_id != reviewer_id:
            raise NotFound("Evaluation not found or you don't have permission to update it")
        self.policy.require(Capability.IS_ACCEPTED_REVIEWER, actor_id=reviewer_id, application_id=evaluation.application_id)

        _apply(evaluation, values, notes)
        self.evaluations.save(evaluation)
        self.check_completion(evaluation.application_id)
        return Outcome(evaluation)

    def check_completion(self, application_id):
        """Mark the application evaluated once every accepted reviewer has scored it."""
        accepted = self.assignments.count_accepted(application_id)
        submitted = self.evaluations.count_distinct_reviewers(application_id)
        if accepted == 0 or submitted < accepted:
            return False
        application = self.applications.get(application_id)
        if application is None or application.status not in OPEN_STATUSES:
            return False
        application.status = "evaluated"
        self.applications.save(application)
        log.info("application %s evaluated (%d/%d reviewers)", application_id, submitted, accepted)
        return True

    def list_evaluations(self, application_id):
        rows = self.evaluations.list_for_application(application_id)
        names = self.users.display_names([r.reviewer_id for r in rows])
        return [(row, names.get(row.reviewer_id)) for row in rows]

    def get_own_evaluation(self, application_id, reviewer_id):
        return self.evaluations.get_for_reviewer(application_id, reviewer_id)


def _apply(evaluation, values, notes):
    for name, value in values.items():
        setattr(evaluation, name, value)
    for name, value in notes.items():
        setattr(evaluation, name, value)
