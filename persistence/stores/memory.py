"""persistence.stores.memory

Dict-backed store for tests and headless runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .base import StoreError


@dataclass
class InMemoryStore:
    """Optional `quota_chars` mimics a storage quota: a write that would push
    the total stored size over it raises StoreError and leaves the store as is.
    """

    data: Dict[str, str] = field(default_factory=dict)
    quota_chars: Optional[int] = None

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_chars is not None:
            used = sum(len(v) for k, v in self.data.items() if k != key)
            if used + len(value) > self.quota_chars:
                raise StoreError(f"quota exceeded writing {key!r} ({len(value)} chars)")
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

    def clear(self) -> None:
        self.data.clear()
