# app/utils/response.py

from typing import TypeVar, Generic, Optional, Dict, Any
from pydantic import BaseModel

from app.constants.error_codes import ErrorCode

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


def success_response(message: str, data: Optional[T] = None) -> Dict[str, Any]:
    return {"success": True, "message": message, "data": data}


def error_response(
    message: str,
    error_code: ErrorCode,
    details: dict | list | None = None,
) -> Dict[str, Any]:
    """Failure envelope. `details` carries per-field errors or conflict context."""
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "details": details,
    }
