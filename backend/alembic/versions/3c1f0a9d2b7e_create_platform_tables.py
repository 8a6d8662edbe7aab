"""create_platform_tables

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2025-06-02 10:14:37.512803

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c1f0a9d2b7e'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('clerk_id', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('first_name', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('last_name', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('user_type', sa.String(length=20), nullable=False, server_default='startup'),
        sa.Column('profile_complete', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('clerk_id'),
    )
    op.create_index('user_type_idx', 'users', ['user_type'])

    op.create_table(
        'startups',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('company_name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('website', sa.String(length=500)),
        sa.Column('stage', sa.String(length=50), nullable=False),
        sa.Column('focus_areas', sa.JSON()),
        sa.Column('product_types', sa.JSON()),
        sa.Column('technologies', sa.JSON()),
        sa.Column('regulatory_status', sa.String(length=50)),
        sa.Column('needs_clinical_trials', sa.Boolean()),
        sa.Column('nih_funding_interest', sa.String(length=20)),
        sa.Column('business_needs', sa.JSON()),
        sa.Column('keywords', sa.JSON()),
        sa.Column('current_goals', sa.JSON()),
        sa.Column('current_needs', sa.JSON()),
        sa.Column('milestones', sa.JSON()),
        sa.Column('funding_status', sa.String(length=100)),
        sa.Column('team_size', sa.Integer()),
        sa.Column('location', sa.String(length=100)),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('startup_stage_idx', 'startups', ['stage'])

    op.create_table(
        'stakeholders',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('stakeholder_type', sa.String(length=50), nullable=False),
        sa.Column('organization_name', sa.String(length=200)),
        sa.Column('contact_email', sa.String(length=255)),
        sa.Column('website', sa.String(length=500)),
        sa.Column('location', sa.String(length=100)),
        sa.Column('bio', sa.Text()),
        sa.Column('services_offered', sa.JSON()),
        sa.Column('therapeutic_areas', sa.JSON()),
        sa.Column('industries', sa.JSON()),
        sa.Column('capabilities', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index('stakeholder_type_idx', 'stakeholders', ['stakeholder_type'])

    op.create_table(
        'connections',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('startup_id', sa.String(length=36), sa.ForeignKey('startups.id'), nullable=False),
        sa.Column('stakeholder_id', sa.String(length=36), sa.ForeignKey('stakeholders.id'), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('initiated_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('message', sa.Text()),
        sa.Column('response', sa.Text()),
        sa.Column('ai_match_score', sa.Integer()),
        sa.Column('match_reasons', sa.JSON()),
        sa.Column('meeting_scheduled', sa.Boolean()),
        sa.Column('follow_up_completed', sa.Boolean()),
        sa.Column('connection_outcome', sa.String(length=100)),
        sa.Column('feedback', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True)),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.UniqueConstraint('startup_id', 'stakeholder_id', name='uq_connection_pair'),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')",
            name='valid_connection_status'
        ),
    )
    op.create_index('connection_status_idx', 'connections', ['status'])
    op.create_index('connection_stakeholder_idx', 'connections', ['stakeholder_id'])

    op.create_table(
        'audit_logs',
        sa.Column('log_id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('activity', sa.String(length=100), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
    )


def downgrade():
    op.drop_table('audit_logs')
    op.drop_index('connection_stakeholder_idx', table_name='connections')
    op.drop_index('connection_status_idx', table_name='connections')
    op.drop_table('connections')
    op.drop_index('stakeholder_type_idx', table_name='stakeholders')
    op.drop_table('stakeholders')
    op.drop_index('startup_stage_idx', table_name='startups')
    op.drop_table('startups')
    op.drop_index('user_type_idx', table_name='users')
    op.drop_table('users')
