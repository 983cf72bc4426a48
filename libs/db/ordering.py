"""Helpers for rows kept in an explicit ``order`` column."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def compact_order(
    db: AsyncSession, model: Any, parent_column: Any, parent_id: Any
) -> int:
    """Renumber the children of ``parent_id`` to 0..n-1 keeping their order.

    Used after a child row is deleted so positions stay contiguous. Does not
    commit. Returns the number of rows renumbered.
    """
    result = await db.execute(
        select(model).where(parent_column == parent_id).order_by(model.order, model.id)
    )
    rows = result.scalars().all()
    for index, row in enumerate(rows):
        if row.order != index:
            row.order = index
    await db.flush()
    return len(rows)
