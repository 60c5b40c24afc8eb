"""engine.game

GameEngine owns the single GameState value of a session.

- dispatch(action) runs the reducer to completion, then attempts a best-effort
  save (never raises because of storage)
- RestartGame is not saved; the stored blob is removed instead
- every dispatch is appended to a JSON-serializable run log that keeps the
  most recent `history_limit` entries
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Dict, Mapping, Optional

from core.state import GameState, YearRecord, create_fresh_game_state

from .actions import RestartGame, action_type_name
from .pipeline import reduce
from .runlog import make_action_log, make_run_export

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 500


class GameEngine:
    def __init__(
        self,
        storage: Optional[Any] = None,
        series: Optional[Mapping[str, Mapping[int, YearRecord]]] = None,
        state: Optional[GameState] = None,
        history_limit: int = HISTORY_LIMIT,
    ):
        self.storage = storage
        self.series = series
        self._state = state if state is not None else create_fresh_game_state(series)
        self._initial = self._state
        self.history: Deque[Dict[str, Any]] = deque(maxlen=history_limit)
        self._steps = 0

    @classmethod
    def restore(cls, storage: Any, series: Optional[Mapping[str, Mapping[int, YearRecord]]] = None) -> "GameEngine":
        """Engine whose state is reconciled from `storage` (fresh game when nothing usable is stored)."""
        return cls(storage=storage, series=series, state=storage.load())

    @property
    def state(self) -> GameState:
        return self._state

    def dispatch(self, action: Any) -> GameState:
        before = self._state
        after = reduce(before, action, self.series)
        self._state = after
        self._steps += 1
        self.history.append(make_action_log(step=self._steps, action=action, before=before, after=after))
        logger.debug("%s -> %s", action_type_name(action), "accepted" if after is not before else "rejected")

        if self.storage is not None:
            if isinstance(action, RestartGame):
                self.storage.clear()
            elif after is not before:
                self.storage.save(after)
        return after

    def reload(self) -> GameState:
        """Replace the in-memory state with what storage reconciles to."""
        if self.storage is not None:
            self._state = self.storage.load()
        return self._state

    def export_run(self, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return make_run_export(config=config or {}, initial_state=self._initial, action_logs=list(self.history))
