"""Create community tables

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-09-28 10:12:05.418200

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c2a9d7b10'
down_revision = None
branch_labels = None
depends_on = None


def _author_columns():
    return [
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('author_name', sa.String(length=120), nullable=False),
        sa.Column('author_avatar', sa.String(length=255), nullable=True),
        sa.Column('author_role', sa.String(length=20), nullable=False),
        sa.Column('author_university', sa.String(length=200), nullable=True),
        sa.Column('author_major', sa.String(length=200), nullable=True),
        sa.Column('author_academic_level', sa.String(length=100), nullable=True),
    ]


def _deletion_columns():
    return [
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_by', sa.Integer(), nullable=True),
        sa.Column('deletion_reason', sa.String(length=500), nullable=True),
    ]


def upgrade():
    op.create_table('universities',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=200), nullable=False),
    sa.Column('name_ar', sa.String(length=200), nullable=True),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('majors',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=200), nullable=False),
    sa.Column('name_ar', sa.String(length=200), nullable=True),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('users',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('email', sa.String(length=120), nullable=False),
    sa.Column('name', sa.String(length=120), nullable=True),
    sa.Column('role', sa.String(length=20), nullable=False),
    sa.Column('is_admin', sa.Boolean(), nullable=False),
    sa.Column('establishment_name', sa.String(length=200), nullable=True),
    sa.Column('university_id', sa.Integer(), nullable=True),
    sa.Column('track', sa.String(length=200), nullable=True),
    sa.Column('level', sa.String(length=100), nullable=True),
    sa.Column('avatar_url', sa.String(length=255), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['university_id'], ['universities.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('community_posts',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('title', sa.String(length=200), nullable=False),
    sa.Column('content', sa.Text(), nullable=False),
    sa.Column('post_type', sa.String(length=20), nullable=False),
    sa.Column('tags', sa.JSON(), nullable=False),
    sa.Column('major_tags', sa.JSON(), nullable=False),
    sa.Column('university_tags', sa.JSON(), nullable=False),
    sa.Column('views_count', sa.Integer(), nullable=False),
    sa.Column('is_solved', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    *_author_columns(),
    *_deletion_columns(),
    sa.ForeignKeyConstraint(['author_id'], ['users.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_community_posts_title'), 'community_posts', ['title'], unique=False)
    op.create_index(op.f('ix_community_posts_post_type'), 'community_posts', ['post_type'], unique=False)
    op.create_index(op.f('ix_community_posts_created_at'), 'community_posts', ['created_at'], unique=False)
    op.create_index(op.f('ix_community_posts_author_id'), 'community_posts', ['author_id'], unique=False)
    op.create_index(op.f('ix_community_posts_is_deleted'), 'community_posts', ['is_deleted'], unique=False)

    op.create_table('community_answers',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('post_id', sa.Integer(), nullable=False),
    sa.Column('content', sa.Text(), nullable=False),
    sa.Column('is_accepted', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    *_author_columns(),
    *_deletion_columns(),
    sa.ForeignKeyConstraint(['author_id'], ['users.id']),
    sa.ForeignKeyConstraint(['post_id'], ['community_posts.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_community_answers_post_id'), 'community_answers', ['post_id'], unique=False)
    op.create_index(op.f('ix_community_answers_created_at'), 'community_answers', ['created_at'], unique=False)
    op.create_index(op.f('ix_community_answers_author_id'), 'community_answers', ['author_id'], unique=False)
    op.create_index(op.f('ix_community_answers_is_deleted'), 'community_answers', ['is_deleted'], unique=False)
    # At most one accepted answer per post
    op.create_index('uq_community_answers_one_accepted', 'community_answers', ['post_id'], unique=True,
                    sqlite_where=sa.text('is_accepted = true'),
                    postgresql_where=sa.text('is_accepted = true'))

    op.create_table('community_comments',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('answer_id', sa.Integer(), nullable=False),
    sa.Column('parent_comment_id', sa.Integer(), nullable=True),
    sa.Column('content', sa.Text(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    *_author_columns(),
    *_deletion_columns(),
    sa.ForeignKeyConstraint(['answer_id'], ['community_answers.id']),
    sa.ForeignKeyConstraint(['author_id'], ['users.id']),
    sa.ForeignKeyConstraint(['parent_comment_id'], ['community_comments.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_community_comments_answer_id'), 'community_comments', ['answer_id'], unique=False)
    op.create_index(op.f('ix_community_comments_parent_comment_id'), 'community_comments', ['parent_comment_id'], unique=False)
    op.create_index(op.f('ix_community_comments_created_at'), 'community_comments', ['created_at'], unique=False)
    op.create_index(op.f('ix_community_comments_author_id'), 'community_comments', ['author_id'], unique=False)
    op.create_index(op.f('ix_community_comments_is_deleted'), 'community_comments', ['is_deleted'], unique=False)

    for table, target, column in (
        ('community_post_likes', 'community_posts', 'post_id'),
        ('community_answer_likes', 'community_answers', 'answer_id'),
        ('community_comment_likes', 'community_comments', 'comment_id'),
    ):
        op.create_table(table,
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column(column, sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint([column], [f'{target}.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(column, 'user_id', name=f"uq_{table[:-1]}")
        )
        op.create_index(op.f(f'ix_{table}_{column}'), table, [column], unique=False)
        op.create_index(op.f(f'ix_{table}_user_id'), table, ['user_id'], unique=False)

    op.create_table('community_reports',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('reporter_id', sa.Integer(), nullable=False),
    sa.Column('reporter_name', sa.String(length=120), nullable=True),
    sa.Column('reported_content_type', sa.String(length=20), nullable=False),
    sa.Column('reported_content_id', sa.Integer(), nullable=False),
    sa.Column('reason', sa.String(length=30), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('reviewed_by', sa.Integer(), nullable=True),
    sa.Column('reviewed_at', sa.DateTime(), nullable=True),
    sa.Column('resolution_notes', sa.Text(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.Column('updated_at', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['reporter_id'], ['users.id']),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_community_reports_reporter_id'), 'community_reports', ['reporter_id'], unique=False)
    op.create_index(op.f('ix_community_reports_reported_content_type'), 'community_reports', ['reported_content_type'], unique=False)
    op.create_index(op.f('ix_community_reports_reported_content_id'), 'community_reports', ['reported_content_id'], unique=False)
    op.create_index(op.f('ix_community_reports_status'), 'community_reports', ['status'], unique=False)
    op.create_index(op.f('ix_community_reports_created_at'), 'community_reports', ['created_at'], unique=False)
    # One pending report per reporter and target
    op.create_index('uq_community_reports_one_pending', 'community_reports',
                    ['reporter_id', 'reported_content_type', 'reported_content_id'], unique=True,
                    sqlite_where=sa.text("status = 'pending'"),
                    postgresql_where=sa.text("status = 'pending'"))

    op.create_table('content_versions',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('content_type', sa.String(length=20), nullable=False),
    sa.Column('content_id', sa.Integer(), nullable=False),
    sa.Column('version_number', sa.Integer(), nullable=False),
    sa.Column('previous_data', sa.JSON(), nullable=False),
    sa.Column('diff', sa.JSON(), nullable=True),
    sa.Column('edited_by', sa.Integer(), nullable=True),
    sa.Column('editor_name', sa.String(length=120), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=True),
    sa.ForeignKeyConstraint(['edited_by'], ['users.id']),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('content_type', 'content_id', 'version_number', name='uq_content_version_number')
    )
    op.create_index(op.f('ix_content_versions_content_type'), 'content_versions', ['content_type'], unique=False)
    op.create_index(op.f('ix_content_versions_content_id'), 'content_versions', ['content_id'], unique=False)


def downgrade():
    op.drop_table('content_versions')
    op.drop_index('uq_community_reports_one_pending', table_name='community_reports')
    op.drop_table('community_reports')
    op.drop_table('community_comment_likes')
    op.drop_table('community_answer_likes')
    op.drop_table('community_post_likes')
    op.drop_table('community_comments')
    op.drop_index('uq_community_answers_one_accepted', table_name='community_answers')
    op.drop_table('community_answers')
    op.drop_table('community_posts')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
    op.drop_table('majors')
    op.drop_table('universities')
