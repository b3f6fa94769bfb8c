"""
HTTP transport for the remote guest API.

Every call goes through ``ApiClient.request``, which attaches the identity
header when asked to, turns non-2xx responses into the error taxonomy and
parses response bodies with a pydantic type before handing them back.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

import httpx
import pydantic
from pydantic import TypeAdapter

from guest_directory.core.config import settings
from guest_directory.core.errors import ConflictError, NotFound, TransportError
from guest_directory.services.identity import IdentityContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


def error_message(response: httpx.Response) -> str:
    """Extract ``{"error": ...}`` from a failed response, or fall back to the status"""
    fallback = f"Erro {response.status_code}"
    if "application/json" not in response.headers.get("content-type", ""):
        return fallback
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return fallback


def raise_for_response(response: httpx.Response) -> None:
    if response.is_success:
        return
    message = error_message(response)
    if response.status_code == 404:
        raise NotFound(message)
    if response.status_code == 409:
        raise ConflictError(message)
    raise TransportError(message, status_code=response.status_code)


class ApiClient:
    """Thin async wrapper around ``httpx.AsyncClient``"""

    def __init__(
        self,
        identity: IdentityContext,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.identity = identity
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    def auth_headers(self) -> dict:
        """Identity header for writes; raises ValidationError when unset"""
        return {settings.IDENTITY_HEADER: self.identity.require()}

    async def request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = False,
        headers: Optional[dict] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        all_headers = dict(headers or {})
        if auth:
            all_headers.update(self.auth_headers())

        try:
            response = await self._http.request(method, path, headers=all_headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransportError(f"Network error: {e}") from e

        if not response.is_success:
            logger.warning(f"{method} {path} returned {response.status_code}")
        raise_for_response(response)
        return response

    async def request_json(self, method: str, path: str, schema: Type[T], **kwargs: Any) -> T:
        """Send a request and validate the JSON body against ``schema``"""
        response = await self.request(method, path, **kwargs)
        try:
            return TypeAdapter(schema).validate_json(response.content)
        except pydantic.ValidationError as e:
            logger.warning(f"{method} {path} returned an invalid body: {e.error_count()} error(s)")
            raise TransportError(
                "Invalid response from server", status_code=response.status_code
            ) from e
