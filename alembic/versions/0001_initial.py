"""Initial schema: users, applications, reviewer assignments, evaluations, notifications

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None

SCORE_COLUMNS = ('need_score', 'novelty_score', 'feasibility_scalability_score', 'market_potential_score',
                 'impact_score')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'user_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email_address', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(200)),
        sa.Column('role', sa.String(20), nullable=False, server_default='startup'),
        sa.Column('password_hash', sa.String(255)),
        sa.Column('auth_token_hash', sa.String(64)),
        sa.Column('auth_token_expires_at', sa.DateTime()),
        *_timestamps(),
        sa.CheckConstraint("role IN ('manager', 'reviewer', 'startup')", name='ck_user_profiles_role'),
    )
    op.create_index('ix_user_profiles_role', 'user_profiles', ['role'])
    op.create_index('ix_user_profiles_auth_token_hash', 'user_profiles', ['auth_token_hash'], unique=True)

    op.create_table(
        'applications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(254)),
        sa.Column('team_name', sa.String(200)),
        sa.Column('your_name', sa.String(200)),
        sa.Column('is_iitm', sa.Boolean()),
        sa.Column('roll_number', sa.String(64)),
        sa.Column('college_name', sa.String(200)),
        sa.Column('current_occupation', sa.String(200)),
        sa.Column('phone_number', sa.String(40)),
        sa.Column('channel', sa.String(100)),
        sa.Column('channel_other', sa.String(200)),
        sa.Column('co_founders_count', sa.Integer()),
        sa.Column('faculty_involved', sa.JSON()),
        sa.Column('prior_entrepreneurship_experience', sa.Boolean()),
        sa.Column('team_prior_entrepreneurship_experience', sa.Boolean()),
        sa.Column('prior_experience_details', sa.Text()),
        sa.Column('mca_registered', sa.Boolean()),
        sa.Column('dpiit_registered', sa.Boolean()),
        sa.Column('dpiit_details', sa.Text()),
        sa.Column('external_funding', sa.JSON()),
        sa.Column('currently_incubated', sa.Boolean()),
        sa.Column('team_members', sa.JSON()),
        sa.Column('nirmaan_can_help', sa.Text()),
        sa.Column('pre_incubation_reason', sa.Text()),
        sa.Column('heard_about_startups', sa.Text()),
        sa.Column('heard_about_nirmaan', sa.Text()),
        sa.Column('problem_solving', sa.Text()),
        sa.Column('your_solution', sa.Text()),
        sa.Column('solution_type', sa.String(100)),
        sa.Column('solution_type_other', sa.String(200)),
        sa.Column('target_industry', sa.String(100)),
        sa.Column('other_industries', sa.JSON()),
        sa.Column('industry_other', sa.String(200)),
        sa.Column('other_industries_other', sa.String(200)),
        sa.Column('technologies_utilized', sa.JSON()),
        sa.Column('other_technology_details', sa.Text()),
        sa.Column('startup_stage', sa.String(100)),
        sa.Column('has_intellectual_property', sa.Boolean()),
        sa.Column('has_potential_intellectual_property', sa.Boolean()),
        sa.Column('ip_file_link', sa.String(512)),
        sa.Column('potential_ip_file_link', sa.String(512)),
        sa.Column('nirmaan_presentation_link', sa.String(512)),
        sa.Column('has_proof_of_concept', sa.Boolean()),
        sa.Column('proof_of_concept_details', sa.Text()),
        sa.Column('has_patents_or_papers', sa.Boolean()),
        sa.Column('patents_or_papers_details', sa.Text()),
        sa.Column('seed_fund_utilization_plan', sa.Text()),
        sa.Column('pitch_video_link', sa.String(512)),
        sa.Column('document1_link', sa.String(512)),
        sa.Column('document2_link', sa.String(512)),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('submitted_at', sa.DateTime()),
        sa.Column('resume_token_hash', sa.String(64)),
        sa.Column('resume_token_expiry', sa.DateTime()),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('draft', 'pending', 'under_review', 'evaluated', 'approved', 'rejected', 'withdrawn')",
            name='ck_applications_status',
        ),
    )
    op.create_index('ix_applications_email', 'applications', ['email'])
    op.create_index('ix_applications_status', 'applications', ['status'])
    op.create_index('ix_applications_submitted_at', 'applications', ['submitted_at'])
    op.create_index('ix_applications_resume_token_hash', 'applications', ['resume_token_hash'], unique=True)

    op.create_table(
        'application_reviewers',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('application_id', sa.String(36), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reviewer_id', sa.String(36), sa.ForeignKey('user_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('invite_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('invited_at', sa.DateTime(), nullable=False),
        sa.Column('responded_at', sa.DateTime()),
        sa.Column('assigned_by', sa.String(36), sa.ForeignKey('user_profiles.id', ondelete='SET NULL')),
        sa.UniqueConstraint('application_id', 'reviewer_id', name='uq_application_reviewer'),
        sa.CheckConstraint("invite_status IN ('pending', 'accepted', 'rejected')",
                           name='ck_application_reviewers_invite_status'),
    )
    op.create_index('ix_application_reviewers_application_id', 'application_reviewers', ['application_id'])
    op.create_index('ix_application_reviewers_reviewer_id', 'application_reviewers', ['reviewer_id'])
    op.create_index('ix_application_reviewers_invite_status', 'application_reviewers', ['invite_status'])

    op.create_table(
        'application_evaluations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('application_id', sa.String(36), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reviewer_id', sa.String(36), sa.ForeignKey('user_profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('need_score', sa.Numeric(4, 2)),
        sa.Column('novelty_score', sa.Numeric(4, 2)),
        sa.Column('feasibility_scalability_score', sa.Numeric(4, 2)),
        sa.Column('market_potential_score', sa.Numeric(4, 2)),
        sa.Column('impact_score', sa.Numeric(4, 2)),
        sa.Column('need_comment', sa.Text()),
        sa.Column('novelty_comment', sa.Text()),
        sa.Column('feasibility_scalability_comment', sa.Text()),
        sa.Column('market_potential_comment', sa.Text()),
        sa.Column('impact_comment', sa.Text()),
        sa.Column('overall_comment', sa.Text()),
        sa.UniqueConstraint('application_id', 'reviewer_id', name='uq_evaluation_application_reviewer'),
        *[sa.CheckConstraint(f'{col} >= 0 AND {col} <= 10', name=f'ck_application_evaluations_{col}')
          for col in SCORE_COLUMNS],
        *_timestamps(),
    )
    op.create_index('ix_application_evaluations_application_id', 'application_evaluations', ['application_id'])
    op.create_index('ix_application_evaluations_reviewer_id', 'application_evaluations', ['reviewer_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('application_id', sa.String(36), sa.ForeignKey('applications.id', ondelete='SET NULL')),
        sa.Column('type', sa.String(50)),
        sa.Column('sent_to', sa.String(1024)),
        sa.Column('subject', sa.String(255)),
        sa.Column('body', sa.Text()),
        sa.Column('provider_message_id', sa.String(255)),
        sa.Column('sent_at', sa.DateTime()),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('application_evaluations')
    op.drop_table('application_reviewers')
    op.drop_table('applications')
    op.drop_table('user_profiles')
