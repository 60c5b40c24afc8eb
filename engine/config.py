"""engine.config

Engine configuration passed from the UI (or the environment).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_STORAGE_KEY = "phaseOutVillageGameState"
DEFAULT_STATE_PATH = ".phaseout/state.json"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


@dataclass(frozen=True)
class EngineConfig:
    storage_key: str = DEFAULT_STORAGE_KEY
    state_path: str = DEFAULT_STATE_PATH
    dataset_path: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if env is None else env
        return cls(
            storage_key=env.get("PHASEOUT_STORAGE_KEY") or DEFAULT_STORAGE_KEY,
            state_path=env.get("PHASEOUT_STATE_PATH") or DEFAULT_STATE_PATH,
            dataset_path=env.get("PHASEOUT_DATASET") or None,
            log_level=(env.get("PHASEOUT_LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Entry points call this; library modules only create loggers."""
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
