import uuid
from datetime import datetime
from typing import List, Optional

from libs.common.schemas import APIModel
from pydantic import Field
from services.roster_service.models import TeamRole
from services.roster_service.schemas import TeamSummary
from services.training_service.models import AttendanceStatus, SessionStatus
from services.workouts_service.schemas import WorkoutSummary


# ============================================================================
# SESSIONS
# ============================================================================


class TrainingSessionCreate(APIModel):
    team_id: uuid.UUID
    title: str = Field(..., min_length=1)
    scheduled_at: datetime
    workout_id: Optional[uuid.UUID] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)  # minutes
    location: Optional[str] = None


class TrainingSessionUpdate(APIModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    status: Optional[SessionStatus] = None


class AttendanceSummary(APIModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    pending: int = 0
    attendance_rate: int = 0


class TrainingSessionResponse(APIModel):
    id: uuid.UUID
    team_id: uuid.UUID
    workout_id: Optional[uuid.UUID] = None
    title: str
    description: Optional[str] = None
    scheduled_at: datetime
    duration: Optional[int] = None
    location: Optional[str] = None
    status: SessionStatus
    created_at: datetime
    updated_at: datetime

    team: Optional[TeamSummary] = None
    workout: Optional[WorkoutSummary] = None
    attendance_summary: AttendanceSummary = Field(default_factory=AttendanceSummary)


# ============================================================================
# ATTENDANCE
# ============================================================================


class AttendanceMember(APIModel):
    """Roster snapshot for an attendance row. ``id`` is None once removed."""

    id: Optional[uuid.UUID] = None
    user_id: str
    role: TeamRole
    number: Optional[int] = None
    position: Optional[str] = None


class AttendanceResponse(APIModel):
    id: uuid.UUID
    session_id: uuid.UUID
    member_id: Optional[uuid.UUID] = None
    status: AttendanceStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    member: Optional[AttendanceMember] = None


class AttendanceUpdate(APIModel):
    status: AttendanceStatus
    notes: Optional[str] = None


class AttendanceBulkItem(AttendanceUpdate):
    id: uuid.UUID


class AttendanceBulkUpdate(APIModel):
    attendance_updates: List[AttendanceBulkItem] = Field(..., min_length=1)


class AttendanceBulkResult(APIModel):
    success: bool = True
    updated: int


class MarkAllRequest(APIModel):
    status: AttendanceStatus = AttendanceStatus.PRESENT


class MarkAllResult(APIModel):
    updated: int
    failed: int


# ============================================================================
# SESSION EXERCISES
# ============================================================================


class SessionExerciseCreate(APIModel):
    session_id: uuid.UUID
    exercise_id: uuid.UUID
    order: int = Field(..., ge=0)
    duration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class SessionExerciseUpdate(APIModel):
    order: Optional[int] = Field(None, ge=0)
    duration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class SessionExerciseResponse(APIModel):
    id: uuid.UUID
    session_id: uuid.UUID
    exercise_id: uuid.UUID
    order: int
    duration: Optional[int] = None
    notes: Optional[str] = None


class SessionExerciseListResponse(APIModel):
    exercises: List[SessionExerciseResponse]


class TrainingSessionDetailResponse(TrainingSessionResponse):
    attendance: List[AttendanceResponse] = []
    exercises: List[SessionExerciseResponse] = []
