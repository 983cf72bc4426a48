import uuid
from datetime import datetime
from typing import List, Optional

from libs.common.schemas import APIModel
from pydantic import Field


# ============================================================================
# WORKOUTS
# ============================================================================


class WorkoutBase(APIModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    team_id: Optional[uuid.UUID] = None
    is_public: bool = False
    total_duration: Optional[int] = Field(None, ge=0)


class WorkoutCreate(WorkoutBase):
    pass


class WorkoutUpdate(APIModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    is_public: Optional[bool] = None
    total_duration: Optional[int] = Field(None, ge=0)


class WorkoutResponse(WorkoutBase):
    id: uuid.UUID
    creator_id: str
    created_at: datetime
    updated_at: datetime
    exercise_count: int = 0


class WorkoutSummary(APIModel):
    id: uuid.UUID
    title: str
    total_duration: Optional[int] = None


class Pagination(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int


class WorkoutListResponse(APIModel):
    workouts: List[WorkoutResponse]
    pagination: Pagination


# ============================================================================
# WORKOUT EXERCISES
# ============================================================================


class WorkoutExerciseCreate(APIModel):
    workout_id: uuid.UUID
    exercise_id: uuid.UUID
    order: int = Field(..., ge=0)
    duration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class WorkoutExerciseUpdate(APIModel):
    order: Optional[int] = Field(None, ge=0)
    duration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class WorkoutExerciseResponse(APIModel):
    id: uuid.UUID
    workout_id: uuid.UUID
    exercise_id: uuid.UUID
    order: int
    duration: Optional[int] = None
    notes: Optional[str] = None


class WorkoutExerciseListResponse(APIModel):
    exercises: List[WorkoutExerciseResponse]


class WorkoutDetailResponse(WorkoutResponse):
    exercises: List[WorkoutExerciseResponse] = []
