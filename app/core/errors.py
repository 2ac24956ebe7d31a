"""
Error taxonomy shared by the authorization layer, the routes and the job scheduler.

HTTP-facing errors subclass HTTPException so FastAPI renders them directly;
`app_error_handler` adds the stable error code to the response body.
"""

from typing import Any, Iterable, List, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class ErrorCode:
    # 401
    UNAUTHORIZED = "UNAUTHORIZED"
    # 403
    FORBIDDEN = "FORBIDDEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    ROLE_REQUIRED = "ROLE_REQUIRED"
    # 404
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    RIDE_NOT_FOUND = "RIDE_NOT_FOUND"
    CLUB_NOT_FOUND = "CLUB_NOT_FOUND"
    LISTING_NOT_FOUND = "LISTING_NOT_FOUND"
    POST_NOT_FOUND = "POST_NOT_FOUND"
    REPORT_NOT_FOUND = "REPORT_NOT_FOUND"
    JOB_NOT_FOUND = "JOB_NOT_FOUND"
    # 409
    CONFLICT = "CONFLICT"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    JOB_ALREADY_RUNNING = "JOB_ALREADY_RUNNING"
    # 500
    DATABASE_ERROR = "DATABASE_ERROR"
    JOB_EXECUTION_FAILED = "JOB_EXECUTION_FAILED"


class AppError(HTTPException):
    """Base class for errors surfaced to API callers with a stable code."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    code_default = ErrorCode.DATABASE_ERROR

    def __init__(self, detail: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.status_code_default, detail=detail)
        self.code = code or self.code_default

    def to_dict(self) -> dict:
        return {"detail": self.detail, "code": self.code}


class Unauthenticated(AppError):
    status_code_default = status.HTTP_401_UNAUTHORIZED
    code_default = ErrorCode.UNAUTHORIZED

    def __init__(self, detail: str = "Authentication required", code: Optional[str] = None):
        super().__init__(detail, code)


class Forbidden(AppError):
    status_code_default = status.HTTP_403_FORBIDDEN
    code_default = ErrorCode.FORBIDDEN

    def __init__(
        self,
        detail: str = "You don't have permission to perform this action",
        code: Optional[str] = None,
        required_roles: Optional[Iterable[Any]] = None,
    ):
        super().__init__(detail, code)
        self.required_roles: List[str] = [getattr(r, "value", r) for r in (required_roles or [])]

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.required_roles:
            body["required_roles"] = self.required_roles
        return body


class NotFound(AppError):
    status_code_default = status.HTTP_404_NOT_FOUND
    code_default = ErrorCode.NOT_FOUND

    def __init__(self, detail: str = "Resource not found", code: Optional[str] = None):
        super().__init__(detail, code)


class Conflict(AppError):
    status_code_default = status.HTTP_409_CONFLICT
    code_default = ErrorCode.CONFLICT

    def __init__(self, detail: str = "Resource already exists", code: Optional[str] = None):
        super().__init__(detail, code)


class DatabaseError(AppError):
    """Store failure; the message never leaks driver details in production."""


class ConfigurationError(Exception):
    """Unknown role/permission name or similar programming defect. Not shown to end users."""


class JobExecutionError(Exception):
    def __init__(self, job_name: str, cause: BaseException):
        super().__init__(f"Job '{job_name}' failed: {cause}")
        self.job_name = job_name
        self.cause = cause


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)
