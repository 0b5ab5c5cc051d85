from typing import Any, Dict, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(
    message: str,
    data: Optional[Dict[str, Any]] = None,
    status_code: int = status.HTTP_200_OK,
    success: bool = True,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Every endpoint answers with {success, message, data}, errors included."""
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": success, "message": message, "data": data or {}}),
        headers=headers,
    )
