"""Training Service models package."""

from services.training_service.models.core import (
    Attendance,
    SessionExercise,
    TrainingSession,
)
from services.training_service.models.enums import (
    MARKABLE_STATUSES,
    AttendanceStatus,
    SessionStatus,
)

__all__ = [
    "MARKABLE_STATUSES",
    "Attendance",
    "AttendanceStatus",
    "SessionExercise",
    "SessionStatus",
    "TrainingSession",
]
