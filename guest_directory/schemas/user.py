"""
User and identity schemas
"""

from typing import Literal, Optional
from pydantic import BaseModel

Role = Literal["groom", "bride", "guest"]

class UserMe(BaseModel):
    """Role of the current identity"""
    role: Role

class UserListItem(BaseModel):
    """Registered user, as listed for impersonation"""
    uracf: str
    role: Role
    first_name: str = ""
    last_name: str = ""

class IdentityRequest(BaseModel):
    """Identity token submitted by the operator"""
    token: str

class IdentityResponse(BaseModel):
    """Current identity and its resolved role"""
    identity: Optional[str] = None
    role: Optional[Role] = None
    privileged: bool = False
