"""
Guest list import session.

    IDLE -> FILE_SELECTED -> UPLOADING -> COMPLETED | FAILED -> IDLE

Rows are parsed and validated by the server; the session only guards that
one file is uploaded at a time and keeps the result in a uniform shape.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from guest_directory.core.errors import TransportError, ValidationError
from guest_directory.schemas.guest import ImportResult
from guest_directory.services.guest_service import GuestService
from guest_directory.services.spreadsheet_service import SpreadsheetService

logger = logging.getLogger(__name__)


class ImportState(str, Enum):
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportSession:
    def __init__(self, guests: GuestService):
        self.guests = guests
        self.state = ImportState.IDLE
        self.filename: Optional[str] = None
        self.result: Optional[ImportResult] = None
        self.error: Optional[TransportError] = None
        self._content: Optional[bytes] = None

    @property
    def is_busy(self) -> bool:
        return self.state == ImportState.UPLOADING

    def select_file(self, filename: str, content: bytes) -> None:
        if self.is_busy:
            raise ValidationError("An import is already in progress")
        SpreadsheetService.check_upload(filename)
        self.filename = filename
        self._content = content
        self.result = None
        self.error = None
        self.state = ImportState.FILE_SELECTED

    async def upload(self) -> ImportResult:
        """Send the selected file.

        A server that rejects every row still counts as COMPLETED; the rows'
        errors are in the result. Only a failed request moves the session to
        FAILED, and then the result carries the transport message as its
        single error.
        """
        if self.state != ImportState.FILE_SELECTED:
            raise ValidationError("No file selected for import")

        self.state = ImportState.UPLOADING
        try:
            result = await self.guests.import_guests(self.filename, self._content)
        except ValidationError:
            self.state = ImportState.FILE_SELECTED
            raise
        except TransportError as e:
            logger.warning(f"Import of {self.filename} failed: {e.message}")
            self.error = e
            self.result = ImportResult.from_failure(e.message)
            self.state = ImportState.FAILED
            return self.result
        except Exception:
            self.state = ImportState.FAILED
            raise
        finally:
            if self.state != ImportState.FILE_SELECTED:
                self._content = None

        self.result = result
        self.state = ImportState.COMPLETED
        return result

    async def run(self, filename: str, content: bytes) -> ImportResult:
        """Select and upload in one step, as the file picker does"""
        self.select_file(filename, content)
        return await self.upload()

    def reset(self) -> None:
        if self.is_busy:
            raise ValidationError("An import is already in progress")
        self.state = ImportState.IDLE
        self.filename = None
        self.result = None
        self.error = None
        self._content = None
