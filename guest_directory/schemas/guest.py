"""
Guest-related Pydantic schemas
"""

import re
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from guest_directory.core.errors import ImportPartialFailure

PHONE_DIGITS = 11
_NON_DIGITS = re.compile(r"\D")

# P = groom's side, R = bride's side
Relationship = Literal["P", "R"]


def normalize_phone(value: Optional[str]) -> str:
    """Strip formatting from a phone number.

    Returns the bare digits, or "" when no phone was given. Anything that is
    not empty must come out as exactly 11 digits (DDD + number).
    """
    if value is None:
        return ""
    digits = _NON_DIGITS.sub("", str(value))
    if digits and len(digits) != PHONE_DIGITS:
        raise ValueError(f"phone must have exactly {PHONE_DIGITS} digits (DDD + number)")
    return digits


class Guest(BaseModel):
    """Guest as returned by the remote API"""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone: Optional[str] = None
    relationship: Relationship
    confirmed: bool = False
    family_group: Optional[int] = Field(default=None, gt=0)
    created_by: str = ""
    updated_by: str = ""
    created_at: datetime
    updated_at: datetime

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone(v) or None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class GuestCreate(BaseModel):
    """Schema for creating a guest.

    ``confirmed`` is not accepted here; attendance is confirmed through an
    update of an existing guest.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone: str = ""
    relationship: Relationship
    family_group: Optional[int] = Field(default=None, gt=0)

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone(v)

    def to_wire(self) -> dict:
        return self.model_dump(exclude_none=True)


class GuestUpdate(BaseModel):
    """Schema for a partial guest update.

    Only fields that were explicitly supplied are sent. Passing ``phone=None``
    or ``phone=""`` clears the phone; leaving it out keeps the current one.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    relationship: Optional[Relationship] = None
    confirmed: Optional[bool] = None
    family_group: Optional[int] = Field(default=None, gt=0)

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone(v)

    @model_validator(mode="after")
    def check_fields(self):
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        for name in self.model_fields_set - {"phone"}:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def to_wire(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ImportResult(BaseModel):
    """Outcome of one guest list import"""
    imported: int = Field(ge=0)
    total: int = Field(ge=0)
    errors: List[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def is_partial_failure(self) -> bool:
        """Server accepted the upload but rejected one or more rows"""
        return self.has_errors

    def raise_for_errors(self) -> "ImportResult":
        if self.has_errors:
            raise ImportPartialFailure(self)
        return self

    @classmethod
    def from_failure(cls, message: str) -> "ImportResult":
        return cls(imported=0, total=0, errors=[message])


class BulkDeleteRequest(BaseModel):
    """Ids to delete in a single call"""
    ids: List[int]
