"""Workouts Service schemas package."""

from services.workouts_service.schemas.main import (
    Pagination,
    WorkoutBase,
    WorkoutCreate,
    WorkoutDetailResponse,
    WorkoutExerciseCreate,
    WorkoutExerciseListResponse,
    WorkoutExerciseResponse,
    WorkoutExerciseUpdate,
    WorkoutListResponse,
    WorkoutResponse,
    WorkoutSummary,
    WorkoutUpdate,
)

__all__ = [
    "Pagination",
    "WorkoutBase",
    "WorkoutCreate",
    "WorkoutDetailResponse",
    "WorkoutExerciseCreate",
    "WorkoutExerciseListResponse",
    "WorkoutExerciseResponse",
    "WorkoutExerciseUpdate",
    "WorkoutListResponse",
    "WorkoutResponse",
    "WorkoutSummary",
    "WorkoutUpdate",
]
