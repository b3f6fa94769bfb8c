"""
Guest directory service: repository calls plus the cache rules around them
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from guest_directory.schemas.guest import Guest, GuestCreate, GuestUpdate, ImportResult
from guest_directory.services.repositories import GuestRepo
from guest_directory.services.sync_cache import ALL_GUESTS, SyncCache, guest_key

logger = logging.getLogger(__name__)


class GuestService:
    """Reads go through the cache; writes go to the server first.

    The cache is only touched after a write succeeds: the collection is
    marked stale and picked up again on the next read, never spliced in
    place. ``update`` also stores the returned guest under its detail key.
    """

    def __init__(self, repo: GuestRepo, cache: Optional[SyncCache] = None):
        self.repo = repo
        self.cache = cache or SyncCache()

    async def list_guests(self) -> List[Guest]:
        return await self.cache.read(ALL_GUESTS, self.repo.list)

    async def get_guest(self, guest_id: int) -> Guest:
        return await self.cache.read(guest_key(guest_id), lambda: self.repo.get(guest_id))

    async def create_guest(self, data: Union[GuestCreate, Dict[str, Any]]) -> Guest:
        guest = await self.repo.create(data)
        self.cache.invalidate(ALL_GUESTS)
        return guest

    async def update_guest(self, guest_id: int, data: Union[GuestUpdate, Dict[str, Any]]) -> Guest:
        guest = await self.repo.update(guest_id, data)
        self.cache.write(guest_key(guest.id), guest)
        self.cache.invalidate(ALL_GUESTS)
        return guest

    async def set_confirmed(self, guest_id: int, confirmed: bool = True) -> Guest:
        return await self.update_guest(guest_id, GuestUpdate(confirmed=confirmed))

    async def delete_guest(self, guest_id: int) -> None:
        await self.repo.delete(guest_id)
        self.cache.remove(guest_key(guest_id))
        self.cache.invalidate(ALL_GUESTS)

    async def delete_guests(self, guest_ids: Iterable[int]) -> List[int]:
        deleted = await self.repo.bulk_delete(guest_ids)
        for guest_id in deleted:
            self.cache.remove(guest_key(guest_id))
        self.cache.invalidate(ALL_GUESTS)
        return deleted

    async def import_guests(self, filename: str, content: bytes) -> ImportResult:
        result = await self.repo.import_file(filename, content)
        if result.imported > 0:
            self.cache.invalidate(ALL_GUESTS)
        else:
            logger.info(f"Import of {filename} added no guests; cache left as is")
        return result
