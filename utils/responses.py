from typing import Any, Optional
from fastapi.responses import JSONResponse


def error_response(
    message: str = "Error occurred",
    errors: Optional[Any] = None,
    status_code: int = 400,
    headers: Optional[dict] = None
) -> JSONResponse:
    """Standard error response"""
    content = {
        "success": False,
        "message": message
    }

    if errors:
        content["errors"] = errors

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers
    )
