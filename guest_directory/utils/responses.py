"""
Standardized response utilities
"""

from typing import Any, Optional
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from guest_directory.core.errors import ConflictError, DirectoryError, NotFound, TransportError, ValidationError
from guest_directory.schemas.common import StandardResponse, ErrorResponse

def success_response(
    message: str,
    data: Any = None,
    status_code: int = 200
) -> JSONResponse:
    """Create standardized success response"""
    response = StandardResponse(
        success=True,
        message=message,
        data=jsonable_encoder(data)
    )
    return JSONResponse(
        content=response.model_dump(),
        status_code=status_code
    )

def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Any = None,
    status_code: int = 400
) -> JSONResponse:
    """Create standardized error response"""
    response = ErrorResponse(
        message=message,
        error_code=error_code,
        details=details
    )
    return JSONResponse(
        content=response.model_dump(),
        status_code=status_code
    )

def directory_error_response(exc: DirectoryError) -> JSONResponse:
    """Map a directory client error onto an HTTP error response"""
    if isinstance(exc, ValidationError):
        return error_response(exc.message, error_code="validation_error", status_code=422)
    if isinstance(exc, NotFound):
        return error_response(exc.message, error_code="not_found", status_code=404)
    if isinstance(exc, ConflictError):
        return error_response(exc.message, error_code="conflict", status_code=409)
    if isinstance(exc, TransportError):
        return error_response(
            exc.message,
            error_code="upstream_error",
            details={"upstream_status": exc.status_code},
            status_code=502
        )
    return error_response(exc.message, status_code=400)

def unauthorized_error(message: str = "Unauthorized"):
    """Create unauthorized error"""
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message
    )

def forbidden_error(message: str = "Forbidden"):
    """Create forbidden error"""
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=message
    )
