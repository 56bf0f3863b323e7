from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | list | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details


def field_error(field: str, message: str) -> AppException:
    """422 for a rule that can only be checked once the payload is parsed."""
    return AppException(
        422,
        "Invalid request data",
        ErrorCode.VALIDATION_ERROR,
        details=[{"field": field, "message": message}],
    )
