"""Per-session exercise edits. They never touch the source workout."""

import uuid
from typing import Any, Optional

from libs.auth.models import AuthUser
from libs.common.errors import NotFound
from libs.db.ordering import compact_order
from services.roster_service.policy import Action
from services.training_service.models import SessionExercise
from services.training_service.services.scheduler import (
    authorize_session,
    get_session_or_404,
    session_exercises,
)
from sqlalchemy.ext.asyncio import AsyncSession


async def list_exercises(
    db: AsyncSession, *, actor: AuthUser, session_id: uuid.UUID
) -> list[SessionExercise]:
    session = await get_session_or_404(db, session_id)
    await authorize_session(db, actor, session, Action.VIEW_SESSION)
    return await session_exercises(db, session_id)


async def add_exercise(
    db: AsyncSession,
    *,
    actor: AuthUser,
    session_id: uuid.UUID,
    exercise_id: uuid.UUID,
    order: int,
    duration: Optional[int] = None,
    notes: Optional[str] = None,
) -> SessionExercise:
    session = await get_session_or_404(db, session_id)
    await authorize_session(db, actor, session, Action.MANAGE_SESSION)

    item = SessionExercise(
        session_id=session_id,
        exercise_id=exercise_id,
        order=order,
        duration=duration,
        notes=notes,
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def _get_for_update(
    db: AsyncSession, actor: AuthUser, item_id: uuid.UUID
) -> SessionExercise:
    item = await db.get(SessionExercise, item_id)
    if item is None:
        raise NotFound("Session exercise not found")
    session = await get_session_or_404(db, item.session_id)
    await authorize_session(db, actor, session, Action.MANAGE_SESSION)
    return item


async def update_exercise(
    db: AsyncSession,
    *,
    actor: AuthUser,
    item_id: uuid.UUID,
    changes: dict[str, Any],
) -> SessionExercise:
    item = await _get_for_update(db, actor, item_id)
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
    item = await _get_for_update(db, actor, item_id)
    session_id = item.session_id
    await db.delete(item)
    await db.flush()
    await compact_order(db, SessionExercise, SessionExercise.session_id, session_id)
    await db.commit()
