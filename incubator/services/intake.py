"""Application intake: full submissions and resumable drafts."""
import json
import logging
from datetime import timedelta

from ..errors import Gone, InvalidInput, NotFound
from ..models import Application
from ..utils.clock import utcnow
from ..utils.tokens import hash_token, new_token
from .events import Outcome

log = logging.getLogger(__name__)

DRAFT_TOKEN_TTL_DAYS = 30
DECISION_STATUSES = ("approved", "rejected", "withdrawn")

# request key -> column, grouped by how the value is normalized
TEXT_FIELDS = {
    "email": "email",
    "teamName": "team_name",
    "yourName": "your_name",
    "rollNumber": "roll_number",
    "collegeName": "college_name",
    "currentOccupation": "current_occupation",
    "phoneNumber": "phone_number",
    "channel": "channel",
    "channelOther": "channel_other",
    "priorExperienceDetails": "prior_experience_details",
    "dpiitDetails": "dpiit_details",
    "nirmaanCanHelp": "nirmaan_can_help",
    "preIncubationReason": "pre_incubation_reason",
    "heardAboutStartups": "heard_about_startups",
    "heardAboutNirmaan": "heard_about_nirmaan",
    "problemSolving": "problem_solving",
    "yourSolution": "your_solution",
    "solutionType": "solution_type",
    "solutionTypeOther": "solution_type_other",
    "targetIndustry": "target_industry",
    "industryOther": "industry_other",
    "otherIndustriesOther": "other_industries_other",
    "otherTechnologyDetails": "other_technology_details",
    "startupStage": "startup_stage",
    "ipFileLink": "ip_file_link",
    "potentialIpFileLink": "potential_ip_file_link",
    "nirmaanPresentationLink": "nirmaan_presentation_link",
    "proofOfConceptDetails": "proof_of_concept_details",
    "patentsOrPapersDetails": "patents_or_papers_details",
    "seedFundUtilizationPlan": "seed_fund_utilization_plan",
    "pitchVideoLink": "pitch_video_link",
    "document1Link": "document1_link",
    "document2Link": "document2_link",
}

YES_NO_FIELDS = {
    "isIITM": "is_iitm",
    "priorEntrepreneurshipExperience": "prior_entrepreneurship_experience",
    "teamPriorEntrepreneurshipExperience": "team_prior_entrepreneurship_experience",
    "mcaRegistered": "mca_registered",
    "dpiitRegistered": "dpiit_registered",
    "currentlyIncubated": "currently_incubated",
    "hasIntellectualProperty": "has_intellectual_property",
    "hasPotentialIntellectualProperty": "has_potential_intellectual_property",
    "hasProofOfConcept": "has_proof_of_concept",
    "hasPatentsOrPapers": "has_patents_or_papers",
}

LIST_FIELDS = {
    "teamMembers": "team_members",
    "facultyInvolved": "faculty_involved",
    "externalFunding": "external_funding",
    "otherIndustries": "other_industries",
    "technologiesUtilized": "technologies_utilized",
}

INT_FIELDS = {
    "coFoundersCount": "co_founders_count",
}

FIELD_COLUMNS = {**TEXT_FIELDS, **YES_NO_FIELDS, **LIST_FIELDS, **INT_FIELDS}

REQUIRED_FIELDS = (
    "email",
    "teamName",
    "yourName",
    "isIITM",
    "rollNumber",
    "phoneNumber",
    "channel",
    "coFoundersCount",
    "priorEntrepreneurshipExperience",
    "teamPriorEntrepreneurshipExperience",
    "mcaRegistered",
    "teamMembers",
    "nirmaanCanHelp",
    "preIncubationReason",
    "heardAboutStartups",
    "heardAboutNirmaan",
    "problemSolving",
    "yourSolution",
    "solutionType",
    "targetIndustry",
    "startupStage",
    "hasIntellectualProperty",
    "hasPotentialIntellectualProperty",
    "nirmaanPresentationLink",
    "hasProofOfConcept",
    "hasPatentsOrPapers",
    "seedFundUtilizationPlan",
    "pitchVideoLink",
)

_YES = {"yes", "y", "true", "1"}
_NO = {"no", "n", "false", "0"}



def parse_list(value):
    """Lists may arrive as JSON text from multipart forms; bad text means empty."""
    if value is None:
        return []
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except ValueError:
            return []
    return list(value) if isinstance(value, (list, tuple)) else []


def parse_yes_no(value, name):
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
    elif isinstance(value, str):
        key = value.strip().lower()
        if not key:
            return None
        if key in _YES:
            return True
        if key in _NO:
            return False
    raise InvalidInput(f"{name} must be Yes or No")


def parse_int(value, name):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, bool):
        raise InvalidInput(f"{name} must be a whole number")
    try:
        number = int(str(value).strip())
    except ValueError:
        raise InvalidInput(f"{name} must be a whole number")
    if number < 0:
        raise InvalidInput(f"{name} must not be negative")
    return number


def _is_blank(value):
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    return str(value).strip() == ""


def check_required(fields):
    for name in REQUIRED_FIELDS:
        value = fields.get(name)
        if name == "teamMembers":
            if not parse_list(value):
                raise InvalidInput(f"Missing required field: {name}. At least one team member is required.")
        elif _is_blank(value):
            raise InvalidInput(f"Missing required field: {name}")


def normalize_fields(fields):
    """Map request keys onto column values.

    Every tracked column gets a value, so saving replaces the whole record.
    """
    values = {}
    for key, column in TEXT_FIELDS.items():
        value = fields.get(key)
        if value is not None and not isinstance(value, str):
            value = str(value)
        values[column] = value.strip() if value and value.strip() else None
    for key, column in YES_NO_FIELDS.items():
        values[column] = parse_yes_no(fields.get(key), key)
    for key, column in LIST_FIELDS.items():
        values[column] = parse_list(fields.get(key))
    for key, column in INT_FIELDS.items():
        values[column] = parse_int(fields.get(key), key)
    return values


class IntakeService:
    def __init__(self, applications, assignments, users, clock=utcnow):
        self.applications = applications
        self.assignments = assignments
        self.users = users
        self.clock = clock

    def submit_application(self, fields, application_id=None):
        check_required(fields)
        values = normalize_fields(fields)

        application = None
        if application_id:
            application = self.applications.get(application_id)
            if application is None or application.status != "draft":
                raise NotFound("Draft application not found")

        if application is None:
            application = Application(**values)
            self._finalize(application)
            self.applications.add(application)
        else:
            _assign(application, values)
            self._finalize(application)
            self.applications.save(application)
        log.info("application %s submitted by %s", application.id, application.email)
        return Outcome(application)

    def _finalize(self, application):
        application.status = "pending"
        application.submitted_at = self.clock()
        application.resume_token_hash = None
        application.resume_token_expiry = None

    def save_draft(self, fields, application_id=None):
        """Create or overwrite a draft.

        Returns an Outcome whose value is ``(application, token)``; the raw
        token is only produced when a new draft is created.
        """
        values = normalize_fields(fields)

        if application_id:
            application = self.applications.get(application_id)
            if application is None or application.status != "draft":
                raise NotFound("Draft application not found")
            _assign(application, values)
            self.applications.save(application)
            return Outcome((application, None))

        token = new_token()
        application = Application(**values)
        application.status = "draft"
        application.resume_token_hash = hash_token(token)
        application.resume_token_expiry = self.clock() + timedelta(days=DRAFT_TOKEN_TTL_DAYS)
        self.applications.add(application)
        log.info("draft %s created", application.id)
        return Outcome((application, token))

    def resume_draft(self, token):
        if not token or not token.strip():
            raise NotFound("Draft not found")
        application = self.applications.find_draft_by_token_hash(hash_token(token.strip()))
        if application is None:
            raise NotFound("Draft not found")
        if application.resume_token_expiry is None or application.resume_token_expiry < self.clock():
            raise Gone("This resume link has expired")
        return application

    def get_application(self, application_id):
        application = self.applications.get(application_id)
        if application is None:
            raise NotFound("Application not found")
        return application

    def list_applications(self, status=None, limit=50, offset=0):
        """Return ``(rows, total)``; each row is ``(application, reviewers)``."""
        apps = self.applications.list(status=status, limit=limit, offset=offset)
        total = self.applications.count(status=status)

        assignments = self.assignments.list_for_applications([a.id for a in apps])
        names = self.users.display_names([a.reviewer_id for a in assignments])
        reviewers = {}
        for a in assignments:
            if a.reviewer_id in names:
                reviewers.setdefault(a.application_id, []).append({"id": a.reviewer_id, "full_name": names[a.reviewer_id]})
        return [(app, reviewers.get(app.id, [])) for app in apps], total

    def set_decision(self, application_id, status):
        if status not in DECISION_STATUSES:
            raise InvalidInput(f"status must be one of: {', '.join(DECISION_STATUSES)}")
        application = self.applications.get(application_id)
        if application is None or application.status == "draft":
            raise NotFound("Application not found")
        application.status = status
        self.applications.save(application)
        log.info("application %s marked %s", application_id, status)
        return Outcome(application)


def _assign(application, values):
    for column, value in values.items():
        setattr(application, column, value)
