"""persistence.parsing

Safe JSON parsing for the stored game blob.

We only ever json.loads; nothing is evaluated. Non-finite literals
(NaN, Infinity) are read as null so the validation table rejects them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ParseResult:
    data: Optional[Dict[str, Any]]
    raw: str
    error: str = ""


def _reject_constant(_: str) -> None:
    return None


def try_parse_json(raw: Optional[str]) -> ParseResult:
    """Best-effort parse. Returns ParseResult(data=None, error=...) on failure."""
    raw = (raw or "").lstrip("\ufeff").strip()
    if not raw:
        return ParseResult(data=None, raw=raw, error="empty blob")
    try:
        obj = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        return ParseResult(data=None, raw=raw, error=f"json.loads: {type(e).__name__}: {e}")
    if not isinstance(obj, dict):
        return ParseResult(data=None, raw=raw, error="JSON root is not an object")
    return ParseResult(data=obj, raw=raw)

