from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    DATASET_NOT_FOUND = ErrorDefinition(
        "DATASET_NOT_FOUND",
        "Dataset not found",
        status.HTTP_404_NOT_FOUND,
    )
    VIEW_NOT_FOUND = ErrorDefinition(
        "VIEW_NOT_FOUND",
        "View not found or expired",
        status.HTTP_404_NOT_FOUND,
    )
    DUPLICATE_RECORD = ErrorDefinition(
        "DUPLICATE_RECORD",
        "Record already exists",
        status.HTTP_409_CONFLICT,
    )
    NOTHING_TO_EXPORT = ErrorDefinition(
        "NOTHING_TO_EXPORT",
        "No records to export based on current filters",
        status.HTTP_409_CONFLICT,
    )
    INVALID_COLLECTION = ErrorDefinition(
        "INVALID_COLLECTION",
        "Record collection is invalid",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)
