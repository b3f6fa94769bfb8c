"""
Repository layer over the remote guest API.

Inputs are validated before anything is sent; responses are validated before
they are returned. Reads are anonymous, writes carry the identity header.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar, Union

import pydantic

from guest_directory.core.errors import NotFound, ValidationError
from guest_directory.schemas.guest import Guest, GuestCreate, GuestUpdate, ImportResult
from guest_directory.schemas.user import Role, UserListItem, UserMe
from guest_directory.services.api_client import ApiClient
from guest_directory.services.spreadsheet_service import SpreadsheetService

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)


def parse_input(schema: Type[M], data: Union[M, Dict[str, Any]]) -> M:
    """Coerce caller input into ``schema``, reporting problems as ValidationError"""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        messages = []
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"])
            messages.append(f"{field}: {err['msg']}" if field else err["msg"])
        raise ValidationError("; ".join(messages)) from e


# -------- User repository --------

class UserRepo:
    def __init__(self, api: ApiClient):
        self.api = api

    async def me(self) -> Optional[Role]:
        """Role of the current identity, or None if the server does not know it"""
        try:
            user = await self.api.request_json("GET", "/api/users/me", UserMe, auth=True)
        except NotFound:
            return None
        return user.role

    async def list_users(self) -> List[UserListItem]:
        return await self.api.request_json("GET", "/api/users", List[UserListItem])


# -------- Guest repository --------

class GuestRepo:
    def __init__(self, api: ApiClient):
        self.api = api

    async def list(self) -> List[Guest]:
        return await self.api.request_json("GET", "/api/guests", List[Guest])

    async def get(self, guest_id: int) -> Guest:
        return await self.api.request_json("GET", f"/api/guests/{guest_id}", Guest)

    async def create(self, data: Union[GuestCreate, Dict[str, Any]]) -> Guest:
        headers = self.api.auth_headers()
        payload = parse_input(GuestCreate, data)
        guest = await self.api.request_json(
            "POST", "/api/guests", Guest, headers=headers, json=payload.to_wire()
        )
        logger.info(f"Guest {guest.id} created ({guest.full_name})")
        return guest

    async def update(self, guest_id: int, data: Union[GuestUpdate, Dict[str, Any]]) -> Guest:
        headers = self.api.auth_headers()
        payload = parse_input(GuestUpdate, data)
        guest = await self.api.request_json(
            "PUT", f"/api/guests/{guest_id}", Guest, headers=headers, json=payload.to_wire()
        )
        logger.info(f"Guest {guest_id} updated: {', '.join(sorted(payload.model_fields_set))}")
        return guest

    async def delete(self, guest_id: int) -> None:
        await self.api.request("DELETE", f"/api/guests/{guest_id}", auth=True)
        logger.info(f"Guest {guest_id} deleted")

    async def bulk_delete(self, guest_ids: Iterable[int]) -> List[int]:
        """Delete several guests in one call; the server applies all or nothing"""
        headers = self.api.auth_headers()
        ids = list(dict.fromkeys(guest_ids))
        if not ids:
            raise ValidationError("No guests selected")
        await self.api.request("DELETE", "/api/guests", headers=headers, json={"ids": ids})
        logger.info(f"{len(ids)} guest(s) deleted")
        return ids

    async def import_file(self, filename: str, content: bytes) -> ImportResult:
        headers = self.api.auth_headers()
        SpreadsheetService.check_upload(filename)
        files = {"file": (filename, content, SpreadsheetService.content_type_for(filename))}
        result = await self.api.request_json(
            "POST", "/api/guests/import", ImportResult, headers=headers, files=files
        )
        logger.info(
            f"Import of {filename}: {result.imported}/{result.total} imported, {len(result.errors)} error(s)"
        )
        return result
