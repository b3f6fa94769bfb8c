"""
Identity routes - set, inspect and clear the operator's identity
"""

from fastapi import APIRouter, Depends

from guest_directory.schemas.user import IdentityRequest, IdentityResponse
from guest_directory.services.directory import GuestDirectory
from guest_directory.utils.security import get_directory
from guest_directory.utils.responses import success_response

router = APIRouter()

async def describe_identity(directory: GuestDirectory) -> IdentityResponse:
    role = await directory.roles.resolve()
    return IdentityResponse(
        identity=directory.identity.current(),
        role=role,
        privileged=directory.roles.privileged(role)
    )

@router.get("")
async def get_identity(directory: GuestDirectory = Depends(get_directory)):
    """Current identity and role"""
    return success_response(
        message="Identity retrieved",
        data=await describe_identity(directory)
    )

@router.post("")
async def set_identity(
    request: IdentityRequest,
    directory: GuestDirectory = Depends(get_directory)
):
    """Set the identity attached to guest list changes"""
    directory.identity.set_identity(request.token)
    return success_response(
        message="Identity set",
        data=await describe_identity(directory)
    )

@router.delete("")
async def clear_identity(directory: GuestDirectory = Depends(get_directory)):
    """Log out"""
    directory.identity.clear_identity()
    return success_response(message="Identity cleared", data=IdentityResponse())

@router.get("/users")
async def list_users(directory: GuestDirectory = Depends(get_directory)):
    """Registered users, for switching identity during development"""
    users = await directory.users.list_users()
    return success_response(message="Users retrieved", data=users)
