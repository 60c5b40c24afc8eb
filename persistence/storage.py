"""persistence.storage

GameStorage ties the codec to a key-value store under one well-known key.

Writes are best effort: a failed full save degrades to the reduced fallback
payload under `<key>_backup` and drops the now stale main blob; if the
fallback fails too it is only logged. Reads never raise: a missing key gives a
fresh game, a malformed blob is removed and gives a fresh game.
"""

from __future__ import annotations

import json
import logging
from typing import Mapping, Optional

from core.state import GameState, YearRecord, create_fresh_game_state

from .codec import fallback_payload, load_state, save_payload
from .parsing import try_parse_json
from .stores.base import KeyValueStore, StoreError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "phaseOutVillageGameState"
BACKUP_SUFFIX = "_backup"

STORE_ERRORS = (StoreError, OSError, ValueError, TypeError)


class GameStorage:
    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
        series: Optional[Mapping[str, Mapping[int, YearRecord]]] = None,
    ):
        self.store = store
        self.key = key
        self.series = series

    @property
    def backup_key(self) -> str:
        return self.key + BACKUP_SUFFIX

    def save(self, state: GameState) -> bool:
        """Persist `state`. Returns True when the full payload was written."""
        try:
            blob = json.dumps(save_payload(state), ensure_ascii=False, allow_nan=False)
            self.store.set(self.key, blob)
        except STORE_ERRORS as e:
            logger.error("Failed to save game state under %r: %s", self.key, e)
        else:
            self._remove_quietly(self.backup_key)
            logger.debug(
                "Saved game state: %d closed fields, %d shutdowns",
                sum(1 for f in state.game_fields if f.status == "closed"),
                len(state.shutdowns),
            )
            return True

        try:
            blob = json.dumps(fallback_payload(state), ensure_ascii=False, allow_nan=False)
            self.store.set(self.backup_key, blob)
            logger.info("Fallback save completed under %r", self.backup_key)
        except STORE_ERRORS:
            logger.exception("Fallback save failed under %r", self.backup_key)
            return False
        # the fallback is now the newest save
        self._remove_quietly(self.key)
        return False

    def load(self) -> GameState:
        """Main key first, then the fallback key; fresh game when neither holds a usable blob."""
        for key in (self.key, self.backup_key):
            try:
                raw = self.store.get(key)
            except STORE_ERRORS as e:
                logger.warning("Could not read %r: %s", key, e)
                continue
            if raw is None:
                continue
            res = try_parse_json(raw)
            if res.data is None:
                logger.warning("Corrupt game state under %r (%s); removing it", key, res.error)
                self._remove_quietly(key)
                continue
            return load_state(res.data, self.series)
        return create_fresh_game_state(self.series)

    def clear(self) -> None:
        self._remove_quietly(self.key)
        self._remove_quietly(self.backup_key)

    def _remove_quietly(self, key: str) -> None:
        try:
            self.store.remove(key)
        except STORE_ERRORS as e:
            logger.warning("Could not remove %r: %s", key, e)
