"""initial schema

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2026-10-17 10:12:31.402117

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f2a9c1d7b10'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def _actor_columns():
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('icon', sa.String(length=1024), nullable=False),
        sa.Column('uri', sa.String(length=1024), nullable=False),
        sa.Column('server_id', sa.Integer(), nullable=False),
    ]


def upgrade():
    op.create_table('server',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('scheme', sa.String(length=10), nullable=False),
        sa.Column('hostname', sa.String(length=255), nullable=False),
        sa.Column('port', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_server_hostname', 'server', ['hostname'], unique=True)
    op.create_index('ix_server_created_at', 'server', ['created_at'], unique=False)

    op.create_table('user',
        *_actor_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(['server_id'], ['server.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'server_id', name='uq_user_name_server')
    )
    op.create_table('group',
        *_actor_columns(),
        *_timestamps(),
        sa.ForeignKeyConstraint(['server_id'], ['server.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'server_id', name='uq_group_name_server')
    )
    for table in ('user', 'group'):
        op.create_index(f'ix_{table}_name', table, ['name'], unique=False)
        op.create_index(f'ix_{table}_uri', table, ['uri'], unique=True)
        op.create_index(f'ix_{table}_server_id', table, ['server_id'], unique=False)
        op.create_index(f'ix_{table}_created_at', table, ['created_at'], unique=False)

    op.create_table('group_follower',
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['group_id'], ['group.id']),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('group_id', 'user_id')
    )

    op.create_table('post',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('uri', sa.String(length=1024), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('server_id', sa.Integer(), nullable=False),
        sa.Column('parent_uri', sa.String(length=1024), nullable=True),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('subject', sa.String(length=255), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('source', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('deleted', sa.Boolean(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['sender_id'], ['user.id']),
        sa.ForeignKeyConstraint(['server_id'], ['server.id']),
        sa.ForeignKeyConstraint(['parent_id'], ['post.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_post_uuid', 'post', ['uuid'], unique=True)
    op.create_index('ix_post_uri', 'post', ['uri'], unique=True)
    for column in ('sender_id', 'server_id', 'parent_uri', 'parent_id', 'timestamp', 'deleted', 'created_at'):
        op.create_index(f'ix_post_{column}', 'post', [column], unique=False)

    op.create_table('post_group',
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['post_id'], ['post.id']),
        sa.ForeignKeyConstraint(['group_id'], ['group.id']),
        sa.PrimaryKeyConstraint('post_id', 'group_id')
    )
    op.create_table('user_like',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.ForeignKeyConstraint(['post_id'], ['post.id']),
        sa.PrimaryKeyConstraint('user_id', 'post_id')
    )

    op.create_table('activity',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uri', sa.String(length=1024), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('activity_object', sa.JSON(), nullable=False),
        sa.Column('source_user_id', sa.Integer(), nullable=True),
        sa.Column('source_group_id', sa.Integer(), nullable=True),
        sa.Column('target_user_id', sa.Integer(), nullable=True),
        sa.Column('target_post_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('source_user_id IS NULL OR source_group_id IS NULL', name='ck_activity_single_source'),
        sa.ForeignKeyConstraint(['source_user_id'], ['user.id']),
        sa.ForeignKeyConstraint(['source_group_id'], ['group.id']),
        sa.ForeignKeyConstraint(['target_user_id'], ['user.id']),
        sa.ForeignKeyConstraint(['target_post_id'], ['post.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_activity_uri', 'activity', ['uri'], unique=True)
    for column in ('type', 'source_user_id', 'source_group_id', 'target_user_id', 'target_post_id', 'created_at'):
        op.create_index(f'ix_activity_{column}', 'activity', [column], unique=False)

    op.create_table('activity_destination_group',
        sa.Column('activity_id', sa.Integer(), nullable=False),
        sa.Column('group_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['activity_id'], ['activity.id']),
        sa.ForeignKeyConstraint(['group_id'], ['group.id']),
        sa.PrimaryKeyConstraint('activity_id', 'group_id')
    )
    op.create_table('activity_destination_user',
        sa.Column('activity_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['activity_id'], ['activity.id']),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('activity_id', 'user_id')
    )

    op.create_table('activity_pub_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('direction', sa.String(length=3), nullable=False),
        sa.Column('activity_id', sa.String(length=1024), nullable=False),
        sa.Column('activity_type', sa.String(length=50), nullable=True),
        sa.Column('result', sa.String(length=10), nullable=True),
        sa.Column('activity_json', sa.Text(), nullable=True),
        sa.Column('exception_message', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_activity_pub_log_activity_id', 'activity_pub_log', ['activity_id'], unique=False)
    op.create_index('ix_activity_pub_log_activity_type', 'activity_pub_log', ['activity_type'], unique=False)
    op.create_index('ix_activity_pub_log_created_at', 'activity_pub_log', ['created_at'], unique=False)
    op.create_index('idx_activitypub_log_lookup', 'activity_pub_log', ['activity_id', 'direction'], unique=False)


def downgrade():
    op.drop_table('activity_pub_log')
    op.drop_table('activity_destination_user')
    op.drop_table('activity_destination_group')
    op.drop_table('activity')
    op.drop_table('user_like')
    op.drop_table('post_group')
    op.drop_table('post')
    op.drop_table('group_follower')
    op.drop_table('group')
    op.drop_table('user')
    op.drop_table('server')
