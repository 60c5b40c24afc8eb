"""persistence.stores.base

Store interface.

A store is a flat string -> string key-value space with get/set/remove/clear,
the same contract as browser local storage. The codec decides what goes in.
"""

from __future__ import annotations

from typing import Optional, Protocol


class StoreError(RuntimeError):
    """Raised by a store that cannot complete a write (quota, read-only, ...)."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...
