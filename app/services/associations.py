"""Many-to-many link maintenance.

``sync_links`` replaces the full set of links of one owner row with an
explicit diff: delete the links that are no longer wanted, insert the ones
that are new, leave the rest alone. Callers own the transaction.

Both columns passed to these helpers belong to the same join table, e.g.
``student_subject.c.student_id`` and ``student_subject.c.subject_id``.
"""

from collections.abc import Iterable

from sqlalchemy import Column, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationFailed


async def get_linked_ids(
    db: AsyncSession,
    owner_column: Column,
    owner_id: int,
    target_column: Column,
) -> set[int]:
    """Ids currently linked to ``owner_id``."""
    result = await db.execute(select(target_column).where(owner_column == owner_id))
    return set(result.scalars().all())


async def sync_links(
    db: AsyncSession,
    owner_column: Column,
    owner_id: int,
    target_column: Column,
    target_ids: Iterable[int],
) -> tuple[set[int], set[int]]:
    """Make the links of ``owner_id`` exactly ``target_ids``.

    Returns the ``(added, removed)`` id sets.
    """
    table = owner_column.table
    wanted = set(target_ids)
    current = await get_linked_ids(db, owner_column, owner_id, target_column)

    removed = current - wanted
    added = wanted - current

    if removed:
        await db.execute(
            delete(table).where(owner_column == owner_id, target_column.in_(removed))
        )
    if added:
        await db.execute(
            insert(table),
            [
                {owner_column.name: owner_id, target_column.name: target_id}
                for target_id in sorted(added)
            ],
        )
    return added, removed


async def attach_link(
    db: AsyncSession,
    owner_column: Column,
    owner_id: int,
    target_column: Column,
    target_id: int,
) -> None:
    """Insert a single link row."""
    await db.execute(
        insert(owner_column.table).values(
            {owner_column.name: owner_id, target_column.name: target_id}
        )
    )


async def detach_link(
    db: AsyncSession,
    owner_column: Column,
    owner_id: int,
    target_column: Column,
    target_id: int,
) -> int:
    """Delete a single link row; returns the number of rows removed."""
    result = await db.execute(
        delete(owner_column.table).where(owner_column == owner_id, target_column == target_id)
    )
    return result.rowcount


async def detach_all(db: AsyncSession, owner_column: Column, owner_id: int) -> None:
    """Delete every link row of ``owner_id``."""
    await db.execute(delete(owner_column.table).where(owner_column == owner_id))


async def link_exists(
    db: AsyncSession,
    owner_column: Column,
    owner_id: int,
    target_column: Column,
    target_id: int,
) -> bool:
    result = await db.execute(
        select(target_column).where(owner_column == owner_id, target_column == target_id)
    )
    return result.first() is not None


async def ensure_targets_exist(
    db: AsyncSession, target_column: Column, target_ids: Iterable[int], field: str
) -> None:
    """Reject ids that do not reference an existing row of the target table.

    ``target_column`` is the primary key column of the referenced model,
    e.g. ``Subject.id``.
    """
    wanted = set(target_ids)
    if not wanted:
        return
    result = await db.execute(select(target_column).where(target_column.in_(wanted)))
    missing = wanted - set(result.scalars().all())
    if missing:
        raise ValidationFailed(
            {field: [f"The selected {field} id {i} is invalid" for i in sorted(missing)]}
        )
