from decimal import Decimal

from ..extensions import db
from .base import TimestampMixin, UUIDPrimaryKeyMixin

# (score column, comment column) per criterion
CRITERIA = (
    ("need_score", "need_comment"),
    ("novelty_score", "novelty_comment"),
    ("feasibility_scalability_score", "feasibility_scalability_comment"),
    ("market_potential_score", "market_potential_comment"),
    ("impact_score", "impact_comment"),
)


class Evaluation(db.Model, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "application_evaluations"

    application_id = db.Column(db.String(36), db.ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = db.Column(db.String(36), db.ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    # 0-10, two decimals
    need_score = db.Column(db.Numeric(4, 2))
    novelty_score = db.Column(db.Numeric(4, 2))
    feasibility_scalability_score = db.Column(db.Numeric(4, 2))
    market_potential_score = db.Column(db.Numeric(4, 2))
    impact_score = db.Column(db.Numeric(4, 2))

    need_comment = db.Column(db.Text)
    novelty_comment = db.Column(db.Text)
    feasibility_scalability_comment = db.Column(db.Text)
    market_potential_comment = db.Column(db.Text)
    impact_comment = db.Column(db.Text)
    overall_comment = db.Column(db.Text)

    __table_args__ = (
        db.UniqueConstraint("application_id", "reviewer_id", name="uq_evaluation_application_reviewer"),
        *(db.CheckConstraint(f"{col} >= 0 AND {col} <= 10", name=f"ck_application_evaluations_{col}")
          for col, _ in CRITERIA),
    )

    @property
    def total_score(self):
        total = Decimal("0")
        for score_col, _ in CRITERIA:
            value = getattr(self, score_col)
            if value is not None:
                total += Decimal(str(value))
        return total

    def __repr__(self) -> str:
        return f"<Evaluation app={self.application_id} reviewer={self.reviewer_id} total={self.total_score}>"
