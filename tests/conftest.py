"""
Shared fixtures: an in-memory stand-in for the remote guest API
"""

import asyncio
import csv
import io
import json
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import httpx
import pytest

from guest_directory.services.directory import GuestDirectory
from guest_directory.services.identity import IdentityContext, IdentityStore


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"error": message})


class FakeGuestApi:
    """Behaves like the guest API closely enough for the client's tests"""

    def __init__(self):
        self.guests: Dict[int, dict] = {}
        self.users = {"GROOM": "groom", "BRIDE": "bride", "GUEST": "guest"}
        self.requests: List[Tuple[str, str]] = []
        self.next_id = 1
        self.fail_next: Optional[httpx.Response] = None
        self.delay = 0  # event-loop turns to wait before answering

    def add_guest(self, **fields) -> dict:
        guest = {
            "id": self.next_id,
            "first_name": "Guest",
            "last_name": str(self.next_id),
            "phone": None,
            "relationship": "P",
            "confirmed": False,
            "family_group": 1,
            "created_by": "SEED1",
            "updated_by": "SEED1",
            "created_at": now_iso(),
            "updated_at": now_iso(),
        }
        guest.update(fields)
        self.guests[guest["id"]] = guest
        self.next_id = max(self.next_id, guest["id"]) + 1
        return guest

    def count(self, method: str, path: str) -> int:
        return self.requests.count((method, path))

    @property
    def write_count(self) -> int:
        return sum(1 for method, _ in self.requests if method != "GET")

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        for _ in range(self.delay):
            await asyncio.sleep(0)

        if self.fail_next is not None:
            response, self.fail_next = self.fail_next, None
            return response

        path = request.url.path
        racf = request.headers.get("user-racf")

        if path == "/api/users/me":
            if not racf:
                return error(401, "Autenticação necessária")
            if racf not in self.users:
                return error(404, "Usuário não encontrado")
            return httpx.Response(200, json={"role": self.users[racf]})

        if path == "/api/users":
            return httpx.Response(200, json=[
                {"uracf": uracf, "role": role, "first_name": uracf.title(), "last_name": "Test"}
                for uracf, role in self.users.items()
            ])

        if request.method != "GET" and not racf:
            return error(400, "header user-racf is required")

        if path == "/api/guests/import" and request.method == "POST":
            return self._import(request, racf)

        if path == "/api/guests":
            if request.method == "GET":
                return httpx.Response(200, json=[self.guests[k] for k in sorted(self.guests)])
            if request.method == "POST":
                return self._create(json.loads(request.content), racf)
            if request.method == "DELETE":
                ids = json.loads(request.content)["ids"]
                missing = [i for i in ids if i not in self.guests]
                if missing:
                    return error(404, f"guests not found: {missing}")
                for i in ids:
                    del self.guests[i]
                return httpx.Response(204)

        guest_id = int(path.rsplit("/", 1)[1])
        if guest_id not in self.guests:
            return error(404, "guest not found")
        if request.method == "GET":
            return httpx.Response(200, json=self.guests[guest_id])
        if request.method == "PUT":
            changes = json.loads(request.content)
            if "phone" in changes:
                changes["phone"] = changes["phone"] or None
            self.guests[guest_id].update(changes, updated_by=racf, updated_at=now_iso())
            return httpx.Response(200, json=self.guests[guest_id])
        if request.method == "DELETE":
            del self.guests[guest_id]
            return httpx.Response(204)
        return error(405, "method not allowed")

    def _create(self, data: dict, racf: str) -> httpx.Response:
        for guest in self.guests.values():
            if (guest["first_name"], guest["last_name"]) == (data["first_name"], data["last_name"]):
                return error(409, f"já existe um convidado com o nome '{data['first_name']} {data['last_name']}'")
        if "family_group" not in data:
            data["family_group"] = max((g["family_group"] for g in self.guests.values()), default=0) + 1
        fields = {**data, "phone": data.get("phone") or None, "created_by": racf, "updated_by": racf}
        return httpx.Response(201, json=self.add_guest(**fields))

    def _import(self, request: httpx.Request, racf: str) -> httpx.Response:
        # single-part multipart body: part headers, blank line, file, closing boundary
        part = request.content.split(b"\r\n\r\n", 1)[1]
        text = part.rsplit(b"\r\n--", 1)[0].decode("utf-8")

        rows = list(csv.DictReader(io.StringIO(text)))
        imported, errors = 0, []
        for line, row in enumerate(rows, start=2):
            if row["relationship"] not in ("P", "R"):
                errors.append(f"linha {line}: tipo de relacionamento inválido")
                continue
            self.add_guest(
                first_name=row["first_name"],
                last_name=row["last_name"],
                phone=row["phone"] or None,
                relationship=row["relationship"],
                family_group=int(row["family_group"]),
                created_by=racf,
                updated_by=racf,
            )
            imported += 1
        return httpx.Response(200, json={"imported": imported, "errors": errors, "total": len(rows)})


def guest_csv(rows) -> bytes:
    """CSV upload with the import columns"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["first_name", "last_name", "phone", "relationship", "family_group"])
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


@pytest.fixture
def fake_api():
    """In-memory guest API"""
    return FakeGuestApi()


@pytest.fixture
def identity(tmp_path):
    """Identity context backed by a temporary file"""
    return IdentityContext(IdentityStore(tmp_path / "identity.json"))


@pytest.fixture
def directory(fake_api, identity):
    """Guest directory client talking to the fake API, identity set to the groom"""
    identity.set_identity("groom")
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(fake_api.handler),
        base_url="http://guests.test",
    )
    return GuestDirectory.build(identity=identity, http_client=http_client)
