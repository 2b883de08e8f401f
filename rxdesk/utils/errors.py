"""Custom error definitions for API exceptions."""
from fastapi import HTTPException
from starlette import status


class RxDeskError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed"

    def __init__(self, detail: str | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)

    def __str__(self):
        return str(self.detail)


class NotFoundError(RxDeskError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ValidationError(RxDeskError):
    status_code = 422
    default_detail = "Invalid input"


class AlreadyDispensedError(RxDeskError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Prescription already dispensed"


class StorageError(RxDeskError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Storage failure"
