"""Training Service schemas package."""

from services.training_service.schemas.main import (
    AttendanceBulkItem,
    AttendanceBulkResult,
    AttendanceBulkUpdate,
    AttendanceMember,
    AttendanceResponse,
    AttendanceSummary,
    AttendanceUpdate,
    MarkAllRequest,
    MarkAllResult,
    SessionExerciseCreate,
    SessionExerciseListResponse,
    SessionExerciseResponse,
    SessionExerciseUpdate,
    TrainingSessionCreate,
    TrainingSessionDetailResponse,
    TrainingSessionResponse,
    TrainingSessionUpdate,
)

__all__ = [
    "AttendanceBulkItem",
    "AttendanceBulkResult",
    "AttendanceBulkUpdate",
    "AttendanceMember",
    "AttendanceResponse",
    "AttendanceSummary",
    "AttendanceUpdate",
    "MarkAllRequest",
    "MarkAllResult",
    "SessionExerciseCreate",
    "SessionExerciseListResponse",
    "SessionExerciseResponse",
    "SessionExerciseUpdate",
    "TrainingSessionCreate",
    "TrainingSessionDetailResponse",
    "TrainingSessionResponse",
    "TrainingSessionUpdate",
]
