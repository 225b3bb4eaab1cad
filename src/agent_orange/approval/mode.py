"""Mode Store — which channel currently receives approval prompts."""

from __future__ import annotations

import logging
from typing import Any

from agent_orange.core.types import Mode, RecordKey
from agent_orange.persistence import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_MODE = Mode.RELAY


class ModeStore:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def get_mode(self) -> Mode:
        row = await self.store.get(RecordKey.MODE.value)
        if row is None:
            return DEFAULT_MODE
        try:
            return Mode(row.item.get("mode"))
        except ValueError:
            logger.warning("Stored mode %r is not recognised; using %s", row.item.get("mode"), DEFAULT_MODE)
            return DEFAULT_MODE

    async def set_mode(self, value: Any) -> Mode:
        """Validate and persist *value*. Raises ValidationError without writing."""
        mode = Mode.parse(value)
        await self.store.put(
            RecordKey.MODE.value,
            {"mode": mode.value, "updatedAt": self.store.now()},
        )
        logger.info("Mode set to %s", mode)
        return mode
