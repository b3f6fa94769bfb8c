"""
Role guard for the admin surface
"""

from fastapi import Depends, Request

from guest_directory.services.directory import GuestDirectory
from guest_directory.utils.responses import forbidden_error, unauthorized_error

def get_directory(request: Request) -> GuestDirectory:
    """Guest directory client attached to the running app"""
    return request.app.state.directory

async def require_privileged_role(directory: GuestDirectory = Depends(get_directory)) -> str:
    """Allow only identities whose resolved role is privileged (groom or bride)"""
    if directory.identity.current() is None:
        unauthorized_error("Identity (RACF) is not configured")

    if not await directory.roles.is_privileged():
        forbidden_error("Only the couple can manage the guest list")
    return directory.roles.cached_role()
