"""
Role resolution for the current identity
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from guest_directory.core.config import settings
from guest_directory.schemas.user import Role
from guest_directory.services.identity import IdentityContext
from guest_directory.services.repositories import UserRepo
from guest_directory.services.sync_cache import SyncCache

logger = logging.getLogger(__name__)


class RoleResolver:
    """Fetches the role behind the current identity and keeps it for a while.

    Until a role has been resolved for the current identity, callers must
    treat the operator as not authorized.
    """

    def __init__(
        self,
        users: UserRepo,
        identity: IdentityContext,
        ttl: float = settings.ROLE_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.users = users
        self.identity = identity
        self.cache = SyncCache(ttl=ttl, clock=clock)
        self._unsubscribe = identity.subscribe(self._on_identity_changed)

    @staticmethod
    def _key(token: str) -> str:
        return f"user-me:{token}"

    def _on_identity_changed(self, token: Optional[str]) -> None:
        logger.info("Identity changed, dropping cached roles")
        self.cache.clear()

    async def resolve(self) -> Optional[Role]:
        token = self.identity.current()
        if token is None:
            return None
        key = self._key(token)
        role = await self.cache.read(key, self.users.me)
        if role is None:
            # unknown users are asked again next time
            self.cache.remove(key)
        return role

    def cached_role(self) -> Optional[Role]:
        token = self.identity.current()
        if token is None or not self.cache.is_fresh(self._key(token)):
            return None
        return self.cache.peek(self._key(token))

    @staticmethod
    def privileged(role: Optional[Role]) -> bool:
        return role in settings.PRIVILEGED_ROLES

    async def is_privileged(self) -> bool:
        return self.privileged(await self.resolve())

    def close(self) -> None:
        self._unsubscribe()
