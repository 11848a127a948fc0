from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas import KilnState
from .models import StateEntry

logger = logging.getLogger(__name__)

STATE_KEYS = ("firings", "zone_offsets", "hardware", "programs")


async def load_state(session: AsyncSession) -> KilnState:
    """Read the four persisted values; any that are missing fall back to defaults."""
    result = await session.execute(select(StateEntry).where(StateEntry.key.in_(STATE_KEYS)))
    stored = {entry.key: entry.value for entry in result.scalars().all()}
    return KilnState.model_validate(stored)


async def save_state(session: AsyncSession, state: KilnState) -> None:
    """Overwrite all four persisted values with the given state."""
    payload = state.model_dump(mode="json")
    now = datetime.now(timezone.utc)
    for key in STATE_KEYS:
        await session.merge(StateEntry(key=key, value=payload[key], updated=now))
    await session.commit()
    logger.debug(f"State saved: {len(state.firings)} firings, {len(state.programs)} programs")
