"""Create club tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CAPACITY_FUNCTION = """
CREATE OR REPLACE FUNCTION enforce_class_session_capacity() RETURNS trigger AS $$
DECLARE
    seats integer;
    taken integer;
BEGIN
    IF NEW.status <> 'CONFIRMED' THEN
        RETURN NEW;
    END IF;
    SELECT capacity INTO seats FROM class_sessions WHERE id = NEW.session_id FOR UPDATE;
    SELECT count(*) INTO taken FROM bookings
        WHERE session_id = NEW.session_id AND status = 'CONFIRMED' AND id <> NEW.id;
    IF taken >= seats THEN
        RAISE EXCEPTION 'class_session_full' USING ERRCODE = 'check_violation';
    END IF;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""

CAPACITY_TRIGGER = """
CREATE TRIGGER trg_bookings_capacity
    BEFORE INSERT OR UPDATE OF status, session_id ON bookings
    FOR EACH ROW EXECUTE FUNCTION enforce_class_session_capacity();
"""

SHRINK_FUNCTION = """
CREATE OR REPLACE FUNCTION enforce_class_session_shrink() RETURNS trigger AS $$
DECLARE
    taken integer;
BEGIN
    SELECT count(*) INTO taken FROM bookings
        WHERE session_id = NEW.id AND status = 'CONFIRMED';
    IF NEW.capacity < taken THEN
        RAISE EXCEPTION 'class_session_overbooked' USING ERRCODE = 'check_violation';
    END IF;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""

SHRINK_TRIGGER = """
CREATE TRIGGER trg_class_sessions_capacity
    BEFORE UPDATE OF capacity ON class_sessions
    FOR EACH ROW EXECUTE FUNCTION enforce_class_session_shrink();
"""


def upgrade() -> None:
    """Create profiles, credentials, modalities, class_sessions and bookings."""
    op.create_table('profiles', sa.Column('id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('role', sqlmodel.sql.sqltypes.AutoString(length=16), nullable=False, server_default='STUDENT'),
        sa.Column('phone', sqlmodel.sql.sqltypes.AutoString(length=32), nullable=True),
        sa.Column('plan_type', sqlmodel.sql.sqltypes.AutoString(length=32), nullable=True),
        sa.Column('observation', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column('must_change_password', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('previous_role', sqlmodel.sql.sqltypes.AutoString(length=16), nullable=True),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_profiles_email'), 'profiles', ['email'], unique=True)
    op.create_index(op.f('ix_profiles_phone'), 'profiles', ['phone'], unique=False)

    op.create_table('credentials', sa.Column('user_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('hashed_password', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('last_sign_in_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('user_id'))
    op.create_index(op.f('ix_credentials_email'), 'credentials', ['email'], unique=True)

    op.create_table('modalities', sa.Column('id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=120), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=False, server_default=''),
        sa.Column('image_url', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=False, server_default=''),
        sa.PrimaryKeyConstraint('id'))

    op.create_table('class_sessions', sa.Column('id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('modality_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('instructor', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False, server_default=''),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('category', sqlmodel.sql.sqltypes.AutoString(length=80), nullable=True),
        sa.CheckConstraint('capacity >= 1', name='ck_class_sessions_capacity_positive'),
        sa.CheckConstraint('duration_minutes >= 1', name='ck_class_sessions_duration_positive'),
        sa.ForeignKeyConstraint(['modality_id'], ['modalities.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_class_sessions_modality_id'), 'class_sessions', ['modality_id'], unique=False)
    op.create_index(op.f('ix_class_sessions_start_time'), 'class_sessions', ['start_time'], unique=False)

    op.create_table('bookings', sa.Column('id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('session_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('user_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('status', sqlmodel.sql.sqltypes.AutoString(length=32), nullable=False,
                  server_default='CONFIRMED'),
        sa.Column('booked_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['class_sessions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_bookings_session_id'), 'bookings', ['session_id'], unique=False)
    op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)

    if op.get_bind().dialect.name == 'postgresql':
        op.execute(CAPACITY_FUNCTION)
        op.execute(CAPACITY_TRIGGER)
        op.execute(SHRINK_FUNCTION)
        op.execute(SHRINK_TRIGGER)


def downgrade() -> None:
    """Drop all club tables."""
    if op.get_bind().dialect.name == 'postgresql':
        op.execute('DROP TRIGGER IF EXISTS trg_class_sessions_capacity ON class_sessions')
        op.execute('DROP FUNCTION IF EXISTS enforce_class_session_shrink()')
        op.execute('DROP TRIGGER IF EXISTS trg_bookings_capacity ON bookings')
        op.execute('DROP FUNCTION IF EXISTS enforce_class_session_capacity()')

    op.drop_index(op.f('ix_bookings_status'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_user_id'), table_name='bookings')
    op.drop_index(op.f('ix_bookings_session_id'), table_name='bookings')
    op.drop_table('bookings')
    op.drop_index(op.f('ix_class_sessions_start_time'), table_name='class_sessions')
    op.drop_index(op.f('ix_class_sessions_modality_id'), table_name='class_sessions')
    op.drop_table('class_sessions')
    op.drop_table('modalities')
    op.drop_index(op.f('ix_credentials_email'), table_name='credentials')
    op.drop_table('credentials')
    op.drop_index(op.f('ix_profiles_phone'), table_name='profiles')
    op.drop_index(op.f('ix_profiles_email'), table_name='profiles')
    op.drop_table('profiles')
