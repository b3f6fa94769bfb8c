"""
Caller identity: the locally stored identity token and change notifications
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Callable, List, Optional

from guest_directory.core.config import settings
from guest_directory.core.errors import ValidationError

logger = logging.getLogger(__name__)

IDENTITY_KEY = "user-racf"
_TOKEN_RE = re.compile(r"^[A-Za-z0-9]{5}$")

IdentityListener = Callable[[Optional[str]], None]


class IdentityStore:
    """JSON file holding the identity token under a well-known key"""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable identity file {self.path}: {e}")
            return None
        token = data.get(IDENTITY_KEY) if isinstance(data, dict) else None
        if token is None:
            return None
        if not isinstance(token, str) or not _TOKEN_RE.fullmatch(token):
            logger.warning(f"Ignoring malformed identity in {self.path}")
            return None
        return token.upper()

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({IDENTITY_KEY: token}, f)

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)


class IdentityContext:
    """Process-wide identity of the operator.

    Reads never fail: ``current()`` returns None when no identity is set.
    Writes go to the store first and then notify subscribers, so anything
    caching per-identity state (roles) can drop it.
    """

    def __init__(self, store: IdentityStore):
        self._store = store
        self._token = store.load()
        self._listeners: List[IdentityListener] = []

    @classmethod
    def from_settings(cls) -> "IdentityContext":
        return cls(IdentityStore(settings.IDENTITY_FILE))

    def current(self) -> Optional[str]:
        return self._token

    def require(self) -> str:
        """Return the identity token or fail before any request is made"""
        if self._token is None:
            raise ValidationError("Identity (RACF) is not configured")
        return self._token

    def set_identity(self, token: str) -> str:
        token = (token or "").strip()
        if not _TOKEN_RE.fullmatch(token):
            raise ValidationError("Identity must be exactly 5 alphanumeric characters")
        token = token.upper()
        self._store.save(token)
        self._token = token
        logger.info(f"Identity set to {token}")
        self._notify()
        return token

    def clear_identity(self) -> None:
        self._store.delete()
        self._token = None
        logger.info("Identity cleared")
        self._notify()

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._token)
