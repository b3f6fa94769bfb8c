"""
Wiring for one guest directory client
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from guest_directory.services.api_client import ApiClient
from guest_directory.services.guest_service import GuestService
from guest_directory.services.identity import IdentityContext
from guest_directory.services.import_service import ImportSession
from guest_directory.services.repositories import GuestRepo, UserRepo
from guest_directory.services.roles import RoleResolver


@dataclass
class GuestDirectory:
    identity: IdentityContext
    api: ApiClient
    users: UserRepo
    roles: RoleResolver
    guests: GuestService
    imports: ImportSession

    @classmethod
    def build(
        cls,
        identity: Optional[IdentityContext] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
    ) -> "GuestDirectory":
        identity = identity or IdentityContext.from_settings()
        api = ApiClient(identity, base_url=base_url, http_client=http_client)
        users = UserRepo(api)
        guests = GuestService(GuestRepo(api))
        return cls(
            identity=identity,
            api=api,
            users=users,
            roles=RoleResolver(users, identity),
            guests=guests,
            imports=ImportSession(guests),
        )

    async def aclose(self) -> None:
        self.roles.close()
        await self.api.aclose()
