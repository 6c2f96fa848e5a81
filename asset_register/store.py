"""
Key-value access to the register table.

Every function only stages changes on the session; callers commit (or roll
back) once per request, the same way the upload endpoint batches its upserts.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from asset_register.models import KeyValue

ASSET_PREFIX = "asset:"


def asset_key(asset_tagging: str) -> str:
    """Storage key for an asset tag, e.g. ``asset:SSBAS/Mo/2025-26/T01``."""
    return f"{ASSET_PREFIX}{asset_tagging}"


async def get(session: AsyncSession, key: str) -> Optional[Dict[str, Any]]:
    row = await session.get(KeyValue, key)
    if row is None:
        return None
    return dict(row.value)


async def set(session: AsyncSession, key: str, value: Dict[str, Any]) -> None:
    """Insert or replace the value stored under ``key``."""
    row = await session.get(KeyValue, key)
    if row is None:
        session.add(KeyValue(key=key, value=dict(value)))
        # Pending rows are not visible to session.get() until flushed
        await session.flush()
        return

    row.value = dict(value)
    flag_modified(row, "value")  # Mark as modified for SQLAlchemy


async def delete(session: AsyncSession, key: str) -> None:
    row = await session.get(KeyValue, key)
    if row is not None:
        await session.delete(row)
        await session.flush()


async def get_by_prefix(session: AsyncSession, prefix: str) -> List[Dict[str, Any]]:
    """
    Return every value whose key starts with ``prefix``, ordered by key.

    Args:
        session: Database session
        prefix: Key prefix, e.g. ``asset:``

    Returns:
        List of stored values (copies, safe to mutate)
    """
    stmt = (
        select(KeyValue)
        .where(KeyValue.key.startswith(prefix, autoescape=True))
        .order_by(KeyValue.key)
    )
    result = await session.execute(stmt)
    return [dict(row.value) for row in result.scalars().all()]
