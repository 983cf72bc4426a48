import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.roster_service.models import TeamRole
from services.roster_service.models.enums import enum_values as role_values
from services.training_service.models.enums import (
    AttendanceStatus,
    SessionStatus,
    enum_values,
)
from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# ============================================================================
# TRAINING SESSION
# ============================================================================


class TrainingSession(Base):
    """A concrete, scheduled training for one team.

    Created together with its Attendance and SessionExercise rows; those are
    snapshots and never follow later roster or workout edits.
    """

    __tablename__ = "training_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Template origin, informational only
    workout_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("workouts.id", ondelete="SET NULL"), nullable=True, index=True
    )

    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes
    location: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    status: Mapped[SessionStatus] = mapped_column(
        SAEnum(
            SessionStatus,
            name="training_session_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=SessionStatus.SCHEDULED,
        server_default="SCHEDULED",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<TrainingSession {self.title} ({self.status.value}) at {self.scheduled_at}>"


# ============================================================================
# SESSION EXERCISE
# ============================================================================


class SessionExercise(Base):
    """Copy of a workout step taken when the session was scheduled."""

    __tablename__ = "session_exercises"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("training_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Exercise content is shared, not copied
    exercise_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    def __repr__(self):
        return f"<SessionExercise #{self.order} of {self.session_id}>"


# ============================================================================
# ATTENDANCE
# ============================================================================


class Attendance(Base):
    """One member's attendance at one session.

    ``user_id`` and ``member_role`` snapshot the roster row at scheduling
    time; ``member_id`` is cleared if that row is later removed.
    """

    __tablename__ = "training_attendance"
    __table_args__ = (
        UniqueConstraint("session_id", "member_id", name="uq_session_member_attendance"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("training_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    member_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("team_members.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    member_role: Mapped[TeamRole] = mapped_column(
        SAEnum(
            TeamRole,
            name="team_role_enum",
            values_callable=role_values,
            validate_strings=True,
        ),
        nullable=False,
    )

    status: Mapped[AttendanceStatus] = mapped_column(
        SAEnum(
            AttendanceStatus,
            name="attendance_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
        default=AttendanceStatus.PENDING,
        server_default="PENDING",
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Attendance Session={self.session_id} User={self.user_id} {self.status.value}>"
