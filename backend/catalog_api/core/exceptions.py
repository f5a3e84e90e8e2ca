import enum
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class AuthenticationException(HTTPException):
    def __init__(self, detail: str = "Not authorized to access this route"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class PermissionDeniedException(HTTPException):
    """Valid credential, insufficient role. Reported as 401 like a missing credential."""

    def __init__(self, role: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"User role {role} is not authorized to access this route",
            headers={"WWW-Authenticate": "Bearer"},
        )
        self.role = role


class NotFoundException(HTTPException):
    def __init__(self, entity: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")
        self.entity = entity


class ValidationException(HTTPException):
    """400 with either a single message or a list of field errors."""

    def __init__(self, detail: str = "Validation failed", errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
        self.errors = errors or []


class DuplicateNameException(ValidationException):
    def __init__(self, name: str):
        super().__init__(detail="Attribute with this name already exists")
        self.name = name


class InvalidAttributeException(ValidationException):
    def __init__(self, attribute_id: str, option: Optional[str] = None, attribute_name: Optional[str] = None):
        if option is None:
            detail = f"Attribute with ID {attribute_id} not found"
        else:
            detail = f'Option "{option}" is not valid for attribute "{attribute_name or attribute_id}"'
        super().__init__(detail=detail)
        self.attribute_id = attribute_id
        self.option = option


class InvalidQueryException(ValidationException):
    def __init__(self, parameter: str, value: Any):
        super().__init__(detail=f"Invalid value for query parameter '{parameter}': {value!r}")
        self.parameter = parameter


class UploadErrorReason(str, enum.Enum):
    INVALID_FIELD = "InvalidField"
    INVALID_TYPE = "InvalidType"
    TOO_LARGE = "TooLarge"
    TOO_MANY = "TooMany"
    STORAGE_FAILURE = "StorageFailure"


class UploadException(HTTPException):
    def __init__(self, reason: UploadErrorReason, detail: str):
        status_code = (
            status.HTTP_500_INTERNAL_SERVER_ERROR
            if reason == UploadErrorReason.STORAGE_FAILURE
            else status.HTTP_400_BAD_REQUEST
        )
        super().__init__(status_code=status_code, detail=detail)
        self.reason = reason
