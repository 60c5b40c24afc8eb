"""engine.runlog

Small helpers for storing run logs.

A run log is JSON-serializable so it can be exported/replayed later: the
action dicts go back through engine.actions.action_from_mapping.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List

from core.state import GameState, metrics_to_dict

from .actions import action_to_dict


def make_action_log(*, step: int, action: Any, before: GameState, after: GameState) -> Dict[str, Any]:
    return {
        "step": int(step),
        "action": action_to_dict(action),
        "accepted": after is not before,
        "before": metrics_to_dict(before),
        "after": metrics_to_dict(after),
        "new_achievements": list(after.new_achievements) if after.achievements != before.achievements else [],
    }


def make_run_export(*, config: Dict[str, Any], initial_state: GameState, action_logs: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "version": 1,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "config": dict(config),
        "initial": metrics_to_dict(initial_state),
        "action_logs": list(action_logs),
    }


def dumps_run_export(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)
