"""
Admin API routes - requires a privileged role
"""

from dataclasses import asdict
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, File, Query, UploadFile
from fastapi.responses import Response

from guest_directory.schemas.guest import BulkDeleteRequest, Relationship
from guest_directory.services.directory import GuestDirectory
from guest_directory.services.directory_view import DirectoryFilters, DirectoryView
from guest_directory.services.import_service import ImportState
from guest_directory.services.spreadsheet_service import SpreadsheetService
from guest_directory.utils.security import get_directory, require_privileged_role
from guest_directory.utils.responses import success_response

router = APIRouter(dependencies=[Depends(require_privileged_role)])

XLSX_MEDIA_TYPE = SpreadsheetService.CONTENT_TYPES[".xlsx"]

@router.get("/guests")
async def list_guests(
    search: str = "",
    relationship: Optional[Relationship] = Query(None),
    confirmed: Optional[bool] = Query(None),
    directory: GuestDirectory = Depends(get_directory)
):
    """List guests with search and filters applied"""
    view = DirectoryView(filters=DirectoryFilters(
        search=search,
        relationship=relationship,
        confirmed=confirmed
    ))
    await view.refresh(directory.guests)
    visible = view.visible()

    return success_response(
        message="Guests retrieved",
        data={
            "guests": visible,
            "total": len(view.guests),
            "visible": len(visible),
            "state": view.state.value,
            "active_filters": view.active_filter_count,
            "stats": asdict(view.stats),
        }
    )

@router.get("/guests/template")
async def download_template():
    """Download the import template"""
    return Response(
        content=SpreadsheetService.create_template(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="guest_template.xlsx"'}
    )

@router.get("/guests/export")
async def export_guests(directory: GuestDirectory = Depends(get_directory)):
    """Export the guest directory to Excel"""
    guests = await directory.guests.list_guests()
    return Response(
        content=SpreadsheetService.export_guests(guests),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="guests.xlsx"'}
    )

@router.get("/guests/family/{family_group}")
async def family_members(
    family_group: int,
    exclude_id: Optional[int] = Query(None),
    directory: GuestDirectory = Depends(get_directory)
):
    """Guests already in a family group, for the guest form"""
    view = await DirectoryView().refresh(directory.guests)
    return success_response(
        message="Family group retrieved",
        data={
            "family_group": family_group,
            "members": view.family_members(family_group, exclude_id=exclude_id),
            "next_family_group": view.next_family_group(),
        }
    )

@router.get("/guests/{guest_id}")
async def get_guest(guest_id: int, directory: GuestDirectory = Depends(get_directory)):
    """Get one guest"""
    guest = await directory.guests.get_guest(guest_id)
    return success_response(message="Guest retrieved", data=guest)

@router.post("/guests")
async def create_guest(
    payload: Dict[str, Any] = Body(...),
    directory: GuestDirectory = Depends(get_directory)
):
    """Create a guest"""
    guest = await directory.guests.create_guest(payload)
    return success_response(message="Guest created", data=guest, status_code=201)

@router.put("/guests/{guest_id}")
async def update_guest(
    guest_id: int,
    payload: Dict[str, Any] = Body(...),
    directory: GuestDirectory = Depends(get_directory)
):
    """Update some fields of a guest"""
    guest = await directory.guests.update_guest(guest_id, payload)
    return success_response(message="Guest updated", data=guest)

@router.delete("/guests/{guest_id}")
async def delete_guest(guest_id: int, directory: GuestDirectory = Depends(get_directory)):
    """Delete a guest"""
    await directory.guests.delete_guest(guest_id)
    return success_response(message="Guest deleted", data={"id": guest_id})

@router.post("/guests/bulk-delete")
async def delete_guests(
    request: BulkDeleteRequest,
    directory: GuestDirectory = Depends(get_directory)
):
    """Delete the selected guests in one call"""
    deleted = await directory.guests.delete_guests(request.ids)
    return success_response(
        message=f"{len(deleted)} guest(s) deleted",
        data={"ids": deleted}
    )

@router.post("/guests/import")
async def import_guests(
    file: UploadFile = File(...),
    directory: GuestDirectory = Depends(get_directory)
):
    """Upload a CSV/XLSX guest list"""
    content = await file.read()
    result = await directory.imports.run(file.filename, content)
    session = directory.imports

    if session.state == ImportState.FAILED:
        message = "Import failed"
    elif result.has_errors:
        message = f"Imported {result.imported} of {result.total} guests with errors"
    else:
        message = f"Imported {result.imported} guests"

    return success_response(
        message=message,
        data={
            "state": session.state.value,
            "result": result,
        }
    )
