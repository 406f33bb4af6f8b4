"""Initial schema with organizations, users, issues and activity logs.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create tenant, user, issue and activity log tables."""

    # 1. Organizations (tenancy boundary)
    op.create_table(
        'organizations',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    # 2. Users, each in exactly one organization
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.Enum('ADMIN', 'MEMBER', name='user_role'), nullable=False, server_default='MEMBER'),
        sa.Column('organization_id', sa.Uuid, sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_organization_id', 'users', ['organization_id'])

    # 3. Issues
    op.create_table(
        'issues',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('priority', sa.String(50)),
        sa.Column(
            'status',
            sa.Enum('OPEN', 'IN_PROGRESS', 'RESOLVED', 'CLOSED', name='issue_status'),
            nullable=False,
            server_default='OPEN',
        ),
        sa.Column('organization_id', sa.Uuid, sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by_id', sa.Uuid, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('assignee_id', sa.Uuid, sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_issues_organization_id', 'issues', ['organization_id'])
    op.create_index('ix_issues_status', 'issues', ['status'])
    op.create_index('ix_issues_created_by_id', 'issues', ['created_by_id'])
    op.create_index('ix_issues_assignee_id', 'issues', ['assignee_id'])
    op.create_index('ix_issues_created_at', 'issues', ['created_at'])

    # 4. Activity log (append-only, removed with its issue)
    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('issue_id', sa.Uuid, sa.ForeignKey('issues.id', ondelete='CASCADE'), nullable=False),
        sa.Column(
            'action_type',
            sa.Enum('CREATED', 'STATUS_CHANGED', 'ASSIGNEE_CHANGED', 'UPDATED', 'DELETED', name='activity_type'),
            nullable=False,
        ),
        sa.Column('old_value', sa.Text),
        sa.Column('new_value', sa.Text),
        sa.Column('performed_by', sa.Uuid, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('performed_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_activity_logs_issue_id', 'activity_logs', ['issue_id'])
    op.create_index('ix_activity_logs_performed_by', 'activity_logs', ['performed_by'])
    op.create_index('ix_activity_logs_performed_at', 'activity_logs', ['performed_at'])


def downgrade() -> None:
    op.drop_table('activity_logs')
    op.drop_table('issues')
    op.drop_table('users')
    op.drop_table('organizations')

    # Drop enums
    op.execute('DROP TYPE IF EXISTS activity_type')
    op.execute('DROP TYPE IF EXISTS issue_status')
    op.execute('DROP TYPE IF EXISTS user_role')
