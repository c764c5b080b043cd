from fastapi import HTTPException, status
from typing import Dict, Optional


class APIError(HTTPException):
    """HTTPException carrying an optional machine-readable error code."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: Optional[str] = None,
        errors: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.errors = errors


class ValidationError(APIError):
    def __init__(
        self,
        detail: str = "Validation failed",
        code: Optional[str] = None,
        errors: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, code=code, errors=errors)


class NotFoundError(APIError):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, detail, code="NOT_FOUND")


class ConflictError(APIError):
    def __init__(self, detail: str, code: Optional[str] = None):
        super().__init__(status.HTTP_409_CONFLICT, detail, code=code)
