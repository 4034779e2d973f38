"""initial schema

Revision ID: 3f1c9a7b2d10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7b2d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create tracked users, teams, pull requests and comments."""
    op.create_table('tracked_users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('github_username', sa.String(length=100), nullable=False),
        sa.Column('github_id', sa.BigInteger(), nullable=True),
        sa.Column('display_name', sa.String(length=200), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('last_pr_sync', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_comment_sync', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('github_username'),
        sa.UniqueConstraint('github_id')
    )
    op.create_table('teams',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('last_sync', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_table('team_memberships',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('assigned_at', sa.DateTime(), nullable=False),
        sa.Column('assigned_by', sa.String(length=100), nullable=True),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['tracked_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_member')
    )
    op.create_table('pull_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('github_id', sa.BigInteger(), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('repository_url', sa.String(length=500), nullable=False),
        sa.Column('comments_url', sa.String(length=500), nullable=True),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('state', sa.Enum('OPEN', 'CLOSED', name='prstate'), nullable=False),
        sa.Column('labels', sa.JSON(), nullable=True),
        sa.Column('total_comments', sa.Integer(), nullable=False),
        sa.Column('draft', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('merged_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('user_id', sa.BigInteger(), nullable=False),
        sa.Column('code_quality', sa.Float(), nullable=False),
        sa.Column('logic_functionality', sa.Float(), nullable=False),
        sa.Column('performance_security', sa.Float(), nullable=False),
        sa.Column('testing_documentation', sa.Float(), nullable=False),
        sa.Column('ui_ux', sa.Float(), nullable=False),
        sa.Column('synced_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['tracked_users.github_id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('github_id')
    )
    # Reports filter a user's PRs by creation time
    op.create_index('ix_pull_requests_user_created', 'pull_requests', ['user_id', 'created_at'])
    op.create_table('comments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('identity', sa.String(length=64), nullable=False),
        sa.Column('type', sa.Enum('ISSUE', 'REVIEW', name='commenttype'), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('commenter', sa.String(length=100), nullable=True),
        sa.Column('commenter_id', sa.BigInteger(), nullable=True),
        sa.Column('github_comment_id', sa.BigInteger(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('pull_request_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['pull_request_id'], ['pull_requests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('identity')
    )
    op.create_index('ix_comments_pull_request_id', 'comments', ['pull_request_id'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index('ix_comments_pull_request_id', table_name='comments')
    op.drop_table('comments')
    op.drop_index('ix_pull_requests_user_created', table_name='pull_requests')
    op.drop_table('pull_requests')
    op.drop_table('team_memberships')
    op.drop_table('teams')
    op.drop_table('tracked_users')
    # Drop the enum types
    sa.Enum(name='commenttype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='prstate').drop(op.get_bind(), checkfirst=True)
