"""
Initial experience hub tables

Revision ID: 3a1f0c9d7e21
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3a1f0c9d7e21'
down_revision = None
branch_labels = None
depends_on = None


def _base_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('modified_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _base_indexes(table):
    op.create_index(op.f(f'ix_{table}_id'), table, ['id'], unique=True)
    op.create_index(op.f(f'ix_{table}_created_at'), table, ['created_at'], unique=False)


def upgrade():
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('github_id', sa.String(), nullable=False),
        sa.Column('github_username', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('bio', sa.String(), nullable=True),
        sa.Column('experience_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('rating_count', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('github_id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
    )
    _base_indexes('users')
    op.create_index(op.f('ix_users_deleted_at'), 'users', ['deleted_at'], unique=False)
    op.create_index('idx_users_github_id', 'users', ['github_id'], unique=False)
    op.create_index('idx_users_username', 'users', ['username'], unique=False)

    op.create_table(
        'experiences',
        *_base_columns(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('ai_assistant_type', sa.String(), nullable=False),
        sa.Column('tags', sa.String(), nullable=False, server_default=''),
        sa.Column('github_urls', sa.JSON(), nullable=False),
        sa.Column('is_news', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('average_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('reaction_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('comment_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('prompt_count', sa.Integer(), nullable=False, server_default='0'),
    )
    _base_indexes('experiences')
    op.create_index(op.f('ix_experiences_deleted_at'), 'experiences', ['deleted_at'], unique=False)
    op.create_index('idx_experiences_user_id', 'experiences', ['user_id'], unique=False)
    op.create_index('idx_experiences_ai_assistant_type', 'experiences', ['ai_assistant_type'], unique=False)
    op.create_index('idx_experiences_rating_created', 'experiences', ['average_rating', 'created_at'], unique=False)

    op.create_table(
        'prompts',
        *_base_columns(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('context', sa.String(length=500), nullable=True),
        sa.Column('results_achieved', sa.String(length=500), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('experience_id', sa.Integer(), sa.ForeignKey('experiences.id'), nullable=False),
        sa.Column('average_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('rating_count', sa.Integer(), nullable=False, server_default='0'),
    )
    _base_indexes('prompts')
    op.create_index(op.f('ix_prompts_deleted_at'), 'prompts', ['deleted_at'], unique=False)
    op.create_index('idx_prompts_experience_id', 'prompts', ['experience_id'], unique=False)
    op.create_index('idx_prompts_order_index', 'prompts', ['experience_id', 'order_index'], unique=False)

    op.create_table(
        'comments',
        *_base_columns(),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('content', sa.String(length=1000), nullable=False),
        sa.Column('experience_id', sa.Integer(), sa.ForeignKey('experiences.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
    )
    _base_indexes('comments')
    op.create_index(op.f('ix_comments_deleted_at'), 'comments', ['deleted_at'], unique=False)
    op.create_index('idx_comments_experience_id', 'comments', ['experience_id'], unique=False)
    op.create_index('idx_comments_user_id', 'comments', ['user_id'], unique=False)

    op.create_table(
        'reactions',
        *_base_columns(),
        sa.Column('reaction_type', sa.String(), nullable=False),
        sa.Column('experience_id', sa.Integer(), sa.ForeignKey('experiences.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.UniqueConstraint('user_id', 'experience_id', 'reaction_type', name='uq_reactions_user_experience_type'),
    )
    _base_indexes('reactions')
    op.create_index('idx_reactions_experience_id', 'reactions', ['experience_id'], unique=False)
    op.create_index('idx_reactions_user_id', 'reactions', ['user_id'], unique=False)

    op.create_table(
        'prompt_ratings',
        *_base_columns(),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('prompt_id', sa.Integer(), sa.ForeignKey('prompts.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.UniqueConstraint('user_id', 'prompt_id', name='uq_prompt_ratings_user_prompt'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_prompt_ratings_range'),
    )
    _base_indexes('prompt_ratings')
    op.create_index('idx_prompt_ratings_prompt_id', 'prompt_ratings', ['prompt_id'], unique=False)


def downgrade():
    op.drop_table('prompt_ratings')
    op.drop_table('reactions')
    op.drop_table('comments')
    op.drop_table('prompts')
    op.drop_table('experiences')
    op.drop_table('users')
