from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    """users, kv_entries, mood_logs"""
    op.create_table(
        'users',
        sa.Column('id', PK, primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'kv_entries',
        sa.Column('key', sa.String(255), primary_key=True),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'mood_logs',
        sa.Column('id', PK, primary_key=True),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mood', sa.String(16), nullable=False),
        sa.Column('mood_label', sa.String(64), nullable=False),
        sa.Column('intensity', sa.Integer(), nullable=True),
        sa.Column('symptoms', sa.JSON(), nullable=True),
        sa.Column('reflection_text', sa.Text(), nullable=True),
        sa.Column('suggestion_text', sa.Text(), nullable=True),
        sa.Column('quote_text', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            'intensity is null or (intensity >= 1 and intensity <= 10)',
            name='ck_mood_logs_intensity',
        ),
    )
    op.create_index('idx_mood_logs_user_created', 'mood_logs', ['user_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_mood_logs_user_created', table_name='mood_logs')
    op.drop_table('mood_logs')
    op.drop_table('kv_entries')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
