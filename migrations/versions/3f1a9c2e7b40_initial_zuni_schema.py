"""initial_zuni_schema

Revision ID: 3f1a9c2e7b40
Revises:
Create Date: 2026-10-17 10:12:05.114203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1a9c2e7b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(150), nullable=True),
        sa.Column('gender', sa.String(20), nullable=True),
        sa.Column('custom_color', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'university',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('short_name', sa.String(50), nullable=False),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('type', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('short_name'),
    )

    op.create_table(
        'user_university_subscription',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('university_id', sa.String(36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['university_id'], ['university.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'university_id', name='uq_subscription_user_university'),
    )
    op.create_index('idx_subscription_user_id', 'user_university_subscription', ['user_id'])

    op.create_table(
        'post',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('image', sa.String(1024), nullable=True),
        sa.Column('audio', sa.String(1024), nullable=True),
        sa.Column('author_id', sa.String(36), nullable=False),
        sa.Column('university_id', sa.String(36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['author_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['university_id'], ['university.id'], ondelete='CASCADE'),
    )
    op.create_index('idx_post_university_created', 'post', ['university_id', 'created_at'])
    op.create_index('idx_post_author_created', 'post', ['author_id', 'created_at'])

    op.create_table(
        'comment',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('image', sa.String(1024), nullable=True),
        sa.Column('audio', sa.String(1024), nullable=True),
        sa.Column('author_id', sa.String(36), nullable=False),
        sa.Column('post_id', sa.String(36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['author_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['post.id'], ondelete='CASCADE'),
    )
    op.create_index('idx_comment_post_created', 'comment', ['post_id', 'created_at'])

    op.create_table(
        'post_read',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('post_id', sa.String(36), nullable=False),
        sa.Column('last_read_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['post.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'post_id', name='uq_post_read_user_post'),
    )

    op.create_table(
        'poke',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('sender_id', sa.String(36), nullable=False),
        sa.Column('recipient_id', sa.String(36), nullable=False),
        sa.Column('post_id', sa.String(36), nullable=True),
        sa.Column('comment_id', sa.String(36), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('seen_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['sender_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recipient_id'], ['user.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['post.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['comment_id'], ['comment.id'], ondelete='CASCADE'),
    )
    op.create_index('idx_poke_recipient_status', 'poke', ['recipient_id', 'status'])

    op.create_table(
        'media_upload',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('kind', sa.String(10), nullable=False),
        sa.Column('path', sa.String(512), nullable=False),
        sa.Column('size_bytes', sa.Integer(), nullable=False),
        sa.Column('content_type', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ondelete='CASCADE'),
    )
    op.create_index('idx_media_upload_user_created', 'media_upload', ['user_id', 'created_at'])


def downgrade():
    op.drop_index('idx_media_upload_user_created', table_name='media_upload')
    op.drop_table('media_upload')
    op.drop_index('idx_poke_recipient_status', table_name='poke')
    op.drop_table('poke')
    op.drop_table('post_read')
    op.drop_index('idx_comment_post_created', table_name='comment')
    op.drop_table('comment')
    op.drop_index('idx_post_author_created', table_name='post')
    op.drop_index('idx_post_university_created', table_name='post')
    op.drop_table('post')
    op.drop_index('idx_subscription_user_id', table_name='user_university_subscription')
    op.drop_table('user_university_subscription')
    op.drop_table('university')
    op.drop_table('user')
