"""create roster, workout and training tables

Revision ID: 3f9c2a7d1e54
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1e54'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


team_role_enum = postgresql.ENUM(
    'COACH', 'TRAINER', 'ASSISTANT_COACH', 'PLAYER', 'PARENT', 'VOLUNTEER',
    name='team_role_enum',
    create_type=False,
)
training_session_status_enum = postgresql.ENUM(
    'SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED',
    name='training_session_status_enum',
    create_type=False,
)
attendance_status_enum = postgresql.ENUM(
    'PENDING', 'PRESENT', 'ABSENT', 'LATE', 'EXCUSED',
    name='attendance_status_enum',
    create_type=False,
)


def upgrade() -> None:
    """Upgrade schema - Add teams, workouts and training sessions."""
    bind = op.get_bind()
    # team_role_enum is shared by team_members and training_attendance
    for enum_type in (team_role_enum, training_session_status_enum, attendance_status_enum):
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        'teams',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sport_id', sa.String(), nullable=False),
        sa.Column('creator_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_teams'),
    )
    op.create_index('ix_teams_creator_id', 'teams', ['creator_id'])

    op.create_table(
        'team_members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('team_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('role', team_role_enum, nullable=False),
        sa.Column('number', sa.Integer(), nullable=True),
        sa.Column('position', sa.String(), nullable=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['team_id'], ['teams.id'],
            name='fk_team_members_team_id_teams', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_team_members'),
        sa.UniqueConstraint('team_id', 'user_id', 'role', name='uq_team_member_role'),
    )
    op.create_index('ix_team_members_team_id', 'team_members', ['team_id'])
    op.create_index('ix_team_members_user_id', 'team_members', ['user_id'])

    op.create_table(
        'workouts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('creator_id', sa.String(), nullable=False),
        sa.Column('team_id', sa.Uuid(), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_public', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('total_duration', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['team_id'], ['teams.id'],
            name='fk_workouts_team_id_teams', ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_workouts'),
    )
    op.create_index('ix_workouts_creator_id', 'workouts', ['creator_id'])
    op.create_index('ix_workouts_team_id', 'workouts', ['team_id'])

    op.create_table(
        'workout_exercises',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('workout_id', sa.Uuid(), nullable=False),
        sa.Column('exercise_id', sa.Uuid(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['workout_id'], ['workouts.id'],
            name='fk_workout_exercises_workout_id_workouts', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_workout_exercises'),
    )
    op.create_index('ix_workout_exercises_workout_id', 'workout_exercises', ['workout_id'])
    op.create_index('ix_workout_exercises_exercise_id', 'workout_exercises', ['exercise_id'])

    op.create_table(
        'training_sessions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('team_id', sa.Uuid(), nullable=False),
        sa.Column('workout_id', sa.Uuid(), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column(
            'status', training_session_status_enum,
            server_default='SCHEDULED', nullable=False,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['team_id'], ['teams.id'],
            name='fk_training_sessions_team_id_teams', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['workout_id'], ['workouts.id'],
            name='fk_training_sessions_workout_id_workouts', ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_training_sessions'),
    )
    op.create_index('ix_training_sessions_team_id', 'training_sessions', ['team_id'])
    op.create_index('ix_training_sessions_workout_id', 'training_sessions', ['workout_id'])
    op.create_index('ix_training_sessions_scheduled_at', 'training_sessions', ['scheduled_at'])

    op.create_table(
        'session_exercises',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('session_id', sa.Uuid(), nullable=False),
        sa.Column('exercise_id', sa.Uuid(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['session_id'], ['training_sessions.id'],
            name='fk_session_exercises_session_id_training_sessions', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_session_exercises'),
    )
    op.create_index('ix_session_exercises_session_id', 'session_exercises', ['session_id'])

    op.create_table(
        'training_attendance',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('session_id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('member_role', team_role_enum, nullable=False),
        sa.Column(
            'status', attendance_status_enum,
            server_default='PENDING', nullable=False,
        ),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ['session_id'], ['training_sessions.id'],
            name='fk_training_attendance_session_id_training_sessions', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['member_id'], ['team_members.id'],
            name='fk_training_attendance_member_id_team_members', ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_training_attendance'),
        sa.UniqueConstraint('session_id', 'member_id', name='uq_session_member_attendance'),
    )
    op.create_index('ix_training_attendance_session_id', 'training_attendance', ['session_id'])
    op.create_index('ix_training_attendance_member_id', 'training_attendance', ['member_id'])


def downgrade() -> None:
    """Downgrade schema - Drop teams, workouts and training sessions."""
    op.drop_table('training_attendance')
    op.drop_table('session_exercises')
    op.drop_table('training_sessions')
    op.drop_table('workout_exercises')
    op.drop_table('workouts')
    op.drop_table('team_members')
    op.drop_table('teams')

    bind = op.get_bind()
    for enum_type in (attendance_status_enum, training_session_status_enum, team_role_enum):
        enum_type.drop(bind, checkfirst=True)
