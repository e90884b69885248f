"""Access-token store handed to actions that call authenticated APIs.

The store is passed in when the actions are built rather than read from a
module-level global, so tests can substitute a fake and concurrent requests
only share what the store itself exposes.
"""

from __future__ import annotations

import threading
from typing import Mapping, Protocol


class TokenStore(Protocol):
    """Capability for looking up per-user bearer tokens."""

    def get(self, user_id: str) -> str | None: ...

    def set(self, user_id: str, token: str) -> None: ...

    def remove(self, user_id: str) -> None: ...


class InMemoryTokenStore:
    """Process-local token store guarded by a lock."""

    def __init__(self, initial: Mapping[str, str] | None = None):
        self._lock = threading.Lock()
        self._tokens: dict[str, str] = {
            str(k): str(v) for k, v in (initial or {}).items() if str(v).strip()
        }

    def get(self, user_id: str) -> str | None:
        with self._lock:
            return self._tokens.get(user_id)

    def set(self, user_id: str, token: str) -> None:
        if not user_id or not token:
            raise ValueError("user_id and token are required")
        with self._lock:
            self._tokens[user_id] = token

    def remove(self, user_id: str) -> None:
        with self._lock:
            self._tokens.pop(user_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._tokens
