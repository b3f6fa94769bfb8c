"""
Spreadsheet helpers for guest list import/export
"""

import io
import os
from typing import Iterable

import pandas as pd

from guest_directory.core.config import settings
from guest_directory.core.errors import ValidationError
from guest_directory.schemas.guest import Guest

class SpreadsheetService:
    """Service for handling guest spreadsheets"""

    IMPORT_COLUMNS = ['first_name', 'last_name', 'phone', 'relationship', 'family_group']
    CONTENT_TYPES = {
        '.csv': 'text/csv',
        '.xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    }

    @staticmethod
    def check_upload(filename: str) -> str:
        """Validate the upload's file type and return its extension"""
        ext = os.path.splitext(filename or '')[1].lower()
        allowed = [e.lower() for e in settings.ALLOWED_IMPORT_EXTENSIONS]
        if ext not in allowed:
            raise ValidationError(
                f"Invalid file format. Please upload one of: {', '.join(allowed)}"
            )
        return ext

    @staticmethod
    def content_type_for(filename: str) -> str:
        ext = os.path.splitext(filename or '')[1].lower()
        return SpreadsheetService.CONTENT_TYPES.get(ext, 'application/octet-stream')

    @staticmethod
    def create_template() -> bytes:
        """Create an import template with the columns the server expects"""
        df = pd.DataFrame(columns=SpreadsheetService.IMPORT_COLUMNS)

        # Sample rows for guidance
        sample_data = [
            ['Maria', 'Silva', '11912345678', 'R', 1],
            ['João', 'Silva', '', 'R', 1],
            ['Carlos', 'Souza', '43996070599', 'P', 2],
        ]

        for row in sample_data:
            df.loc[len(df)] = row

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Guest List')

        return buffer.getvalue()

    @staticmethod
    def export_guests(guests: Iterable[Guest], include_confirmation: bool = True) -> bytes:
        """Export the guest directory to Excel"""
        data = []
        for guest in guests:
            row = {
                'first_name': guest.first_name,
                'last_name': guest.last_name,
                'phone': guest.phone or '',
                'relationship': guest.relationship,
                'family_group': guest.family_group,
            }
            if include_confirmation:
                row['confirmed'] = 'Yes' if guest.confirmed else 'No'

            data.append(row)

        columns = list(SpreadsheetService.IMPORT_COLUMNS)
        if include_confirmation:
            columns.append('confirmed')
        df = pd.DataFrame(data, columns=columns)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Guest List')

        return buffer.getvalue()
