"""Workout template CRUD. Templates are plain mutable data; sessions copy them."""

import math
import uuid
from typing import Any, Optional

from libs.auth.models import AuthUser
from libs.common.errors import NotFound, ValidationFailed
from libs.common.logging import get_logger
from libs.db.ordering import compact_order
from services.roster_service.models import TeamMember
from services.roster_service.policy import (
    Action,
    WorkoutContext,
    ensure,
    load_team_context,
)
from services.workouts_service.models import Workout, WorkoutExercise
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


async def get_workout_or_404(db: AsyncSession, workout_id: uuid.UUID) -> Workout:
    workout = await db.get(Workout, workout_id)
    if workout is None:
        raise NotFound("Workout not found")
    return workout


async def load_workout_context(
    db: AsyncSession, actor: AuthUser, workout: Workout
) -> WorkoutContext:
    team_ctx = None
    if workout.team_id is not None:
        team_ctx = await load_team_context(db, actor, workout.team_id)
    return WorkoutContext(
        creator_id=workout.creator_id,
        is_public=workout.is_public,
        team=team_ctx,
    )


async def exercise_counts(
    db: AsyncSession, workout_ids: list[uuid.UUID]
) -> dict[uuid.UUID, int]:
    if not workout_ids:
        return {}
    result = await db.execute(
        select(WorkoutExercise.workout_id, func.count(WorkoutExercise.id))
        .where(WorkoutExercise.workout_id.in_(workout_ids))
        .group_by(WorkoutExercise.workout_id)
    )
    return {workout_id: count for workout_id, count in result.all()}


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------


async def create_workout(
    db: AsyncSession,
    *,
    actor: AuthUser,
    title: str,
    description: Optional[str] = None,
    team_id: Optional[uuid.UUID] = None,
    is_public: bool = False,
    total_duration: Optional[int] = None,
) -> Workout:
    if team_id is not None:
        ctx = await load_team_context(db, actor, team_id)
        ensure(actor, Action.MANAGE_TEAM, ctx)

    workout = Workout(
        creator_id=actor.user_id,
        team_id=team_id,
        title=title,
        description=description,
        is_public=is_public,
        total_duration=total_duration,
    )
    db.add(workout)
    await db.commit()
    await db.refresh(workout)

    logger.info("Created workout %s (%s) by %s", workout.id, workout.title, actor.user_id)
    return workout


async def list_workouts(
    db: AsyncSession,
    *,
    actor: AuthUser,
    team_id: Optional[uuid.UUID] = None,
    my_workouts: bool = False,
    public_only: bool = False,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[Workout], int]:
    """
    List workouts visible to the actor.

    Default scope is the actor's own workouts plus those of teams they belong
    to. ``my_workouts`` narrows to the actor's own; ``public_only`` switches to
    public templates from anyone.
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    if public_only:
        conditions = [Workout.is_public.is_(True)]
    elif my_workouts:
        conditions = [Workout.creator_id == actor.user_id]
    else:
        my_team_ids = select(TeamMember.team_id).where(
            TeamMember.user_id == actor.user_id
        )
        conditions = [
            or_(Workout.creator_id == actor.user_id, Workout.team_id.in_(my_team_ids))
        ]

    if team_id is not None:
        conditions.append(Workout.team_id == team_id)
    if search:
        pattern = f"%{search}%"
        conditions.append(
            or_(Workout.title.ilike(pattern), Workout.description.ilike(pattern))
        )

    total = (
        await db.execute(select(func.count(Workout.id)).where(*conditions))
    ).scalar_one()
    result = await db.execute(
        select(Workout)
        .where(*conditions)
        .order_by(Workout.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def get_workout(
    db: AsyncSession, *, actor: AuthUser, workout_id: uuid.UUID
) -> tuple[Workout, list[WorkoutExercise]]:
    workout = await get_workout_or_404(db, workout_id)
    ensure(actor, Action.VIEW_WORKOUT, await load_workout_context(db, actor, workout))
    return workout, await ordered_exercises(db, workout_id)


async def update_workout(
    db: AsyncSession,
    *,
    actor: AuthUser,
    workout_id: uuid.UUID,
    changes: dict[str, Any],
) -> Workout:
    for name, label in (("title", "title"), ("is_public", "isPublic")):
        if name in changes and changes[name] is None:
            raise ValidationFailed(f"{label} cannot be null")
    workout = await get_workout_or_404(db, workout_id)
    ensure(actor, Action.MANAGE_WORKOUT, await load_workout_context(db, actor, workout))

    for field, value in changes.items():
        setattr(workout, field, value)
    await db.commit()
    await db.refresh(workout)
    return workout


async def delete_workout(
    db: AsyncSession, *, actor: AuthUser, workout_id: uuid.UUID
) -> None:
    """Delete a template. Sessions scheduled from it keep their own copies."""
    # Import here to avoid circular imports
    from services.training_service.models import TrainingSession

    workout = await get_workout_or_404(db, workout_id)
    ensure(actor, Action.MANAGE_WORKOUT, await load_workout_context(db, actor, workout))

    await db.execute(
        update(TrainingSession)
        .where(TrainingSession.workout_id == workout_id)
        .values(workout_id=None)
    )
    await db.execute(
        delete(WorkoutExercise).where(WorkoutExercise.workout_id == workout_id)
    )
    await db.delete(workout)
    await db.commit()

    logger.info("Deleted workout %s by %s", workout_id, actor.user_id)


# ---------------------------------------------------------------------------
# Workout exercises
# ---------------------------------------------------------------------------


async def ordered_exercises(
    db: AsyncSession, workout_id: uuid.UUID
) -> list[WorkoutExercise]:
    result = await db.execute(
        select(WorkoutExercise)
        .where(WorkoutExercise.workout_id == workout_id)
        .order_by(WorkoutExercise.order, WorkoutExercise.id)
    )
    return list(result.scalars().all())


async def add_exercise(
    db: AsyncSession,
    *,
    actor: AuthUser,
    workout_id: uuid.UUID,
    exercise_id: uuid.UUID,
    order: int,
    duration: Optional[int] = None,
    notes: Optional[str] = None,
) -> WorkoutExercise:
    workout = await get_workout_or_404(db, workout_id)
    ensure(actor, Action.MANAGE_WORKOUT, await load_workout_context(db, actor, workout))

    item = WorkoutExercise(
        workout_id=workout_id,
        exercise_id=exercise_id,
        order=order,
        duration=duration,
        notes=notes,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def list_exercises(
    db: AsyncSession, *, actor: AuthUser, workout_id: uuid.UUID
) -> list[WorkoutExercise]:
    workout = await get_workout_or_404(db, workout_id)
    ensure(actor, Action.VIEW_WORKOUT, await load_workout_context(db, actor, workout))
    return await ordered_exercises(db, workout_id)


async def _get_exercise_for_update(
    db: AsyncSession, actor: AuthUser, item_id: uuid.UUID
) -> WorkoutExercise:
    item = await db.get(WorkoutExercise, item_id)
    if item is None:
        raise NotFound("Workout exercise not found")
    workout = await get_workout_or_404(db, item.workout_id)
    ensure(actor, Action.MANAGE_WORKOUT, await load_workout_context(db, actor, workout))
    return item


async def update_exercise(
    db: AsyncSession,
    *,
    actor: AuthUser,
    item_id: uuid.UUID,
    changes: dict[str, Any],
) -> WorkoutExercise:
    item = await _get_exercise_for_update(db, actor, item_id)
    for field, value in changes.items():
        if field == "order" and value is None:
            continue
        setattr(item, field, value)
    await db.commit()
    await db.refresh(item)
    return item


async def delete_exercise(
    db: AsyncSession, *, actor: AuthUser, item_id: uuid.UUID
) -> None:
    """Remove a step and close the gap in the remaining order."""
    item = await _get_exercise_for_update(db, actor, item_id)
    workout_id = item.workout_id
    await db.delete(item)
    await db.flush()
    await compact_order(db, WorkoutExercise, WorkoutExercise.workout_id, workout_id)
    await db.commit()
