"""Workouts Service models package."""

from services.workouts_service.models.core import Workout, WorkoutExercise

__all__ = [
    "Workout",
    "WorkoutExercise",
]
