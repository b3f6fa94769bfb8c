"""
Pydantic schemas package
"""

from .common import *
from .guest import *
from .user import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "Relationship",
    "normalize_phone",
    "Guest",
    "GuestCreate",
    "GuestUpdate",
    "ImportResult",
    "BulkDeleteRequest",
    "Role",
    "UserMe",
    "UserListItem",
    "IdentityRequest",
    "IdentityResponse",
]
