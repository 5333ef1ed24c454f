from ..extensions import db
from .base import TimestampMixin, UUIDPrimaryKeyMixin

APPLICATION_STATUSES = ("draft", "pending", "under_review", "evaluated", "approved", "rejected", "withdrawn")


class Application(db.Model, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "applications"

    # basic information
    email = db.Column(db.String(254), index=True)
    team_name = db.Column(db.String(200))
    your_name = db.Column(db.String(200))
    is_iitm = db.Column(db.Boolean)
    roll_number = db.Column(db.String(64))
    college_name = db.Column(db.String(200))
    current_occupation = db.Column(db.String(200))
    phone_number = db.Column(db.String(40))
    channel = db.Column(db.String(100))
    channel_other = db.Column(db.String(200))
    co_founders_count = db.Column(db.Integer)
    faculty_involved = db.Column(db.JSON)  # [{"name": ..., "department": ...}]

    # entrepreneurship experience
    prior_entrepreneurship_experience = db.Column(db.Boolean)
    team_prior_entrepreneurship_experience = db.Column(db.Boolean)
    prior_experience_details = db.Column(db.Text)

    # registration & funding
    mca_registered = db.Column(db.Boolean)
    dpiit_registered = db.Column(db.Boolean)
    dpiit_details = db.Column(db.Text)
    external_funding = db.Column(db.JSON)
    currently_incubated = db.Column(db.Boolean)

    team_members = db.Column(db.JSON)  # [{"name": ..., "email": ..., "role": ...}]

    # about the programme
    nirmaan_can_help = db.Column(db.Text)
    pre_incubation_reason = db.Column(db.Text)
    heard_about_startups = db.Column(db.Text)
    heard_about_nirmaan = db.Column(db.Text)

    # problem & solution
    problem_solving = db.Column(db.Text)
    your_solution = db.Column(db.Text)
    solution_type = db.Column(db.String(100))
    solution_type_other = db.Column(db.String(200))

    # industry & technologies
    target_industry = db.Column(db.String(100))
    other_industries = db.Column(db.JSON)
    industry_other = db.Column(db.String(200))
    other_industries_other = db.Column(db.String(200))
    technologies_utilized = db.Column(db.JSON)
    other_technology_details = db.Column(db.Text)

    # stage & IP
    startup_stage = db.Column(db.String(100))
    has_intellectual_property = db.Column(db.Boolean)
    has_potential_intellectual_property = db.Column(db.Boolean)
    ip_file_link = db.Column(db.String(512))
    potential_ip_file_link = db.Column(db.String(512))

    # presentation & proof
    nirmaan_presentation_link = db.Column(db.String(512))
    has_proof_of_concept = db.Column(db.Boolean)
    proof_of_concept_details = db.Column(db.Text)
    has_patents_or_papers = db.Column(db.Boolean)
    patents_or_papers_details = db.Column(db.Text)

    # seed fund & pitch
    seed_fund_utilization_plan = db.Column(db.Text)
    pitch_video_link = db.Column(db.String(512))
    document1_link = db.Column(db.String(512))
    document2_link = db.Column(db.String(512))

    # lifecycle
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    submitted_at = db.Column(db.DateTime, index=True)
    # only meaningful while status == 'draft'
    resume_token_hash = db.Column(db.String(64), unique=True, index=True)
    resume_token_expiry = db.Column(db.DateTime)

    __table_args__ = (
        db.CheckConstraint(f"status IN {APPLICATION_STATUSES!r}", name="ck_applications_status"),
    )

    def __repr__(self) -> str:
        return f"<Application id={self.id} team={self.team_name!r} status={self.status}>"
