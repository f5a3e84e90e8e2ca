from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from catalog_api.schemas.common import CamelModel

ATTRIBUTE_NAME_MAX_LENGTH = 50


def clean_name(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("Attribute name is required")
    if len(value) > ATTRIBUTE_NAME_MAX_LENGTH:
        raise ValueError(f"Attribute name cannot be more than {ATTRIBUTE_NAME_MAX_LENGTH} characters")
    return value


def clean_options(values: List[str]) -> List[str]:
    options: List[str] = []
    for raw in values:
        item = str(raw).strip()
        if not item:
            raise ValueError("Options cannot be empty strings")
        if item not in options:
            options.append(item)
    if not options:
        raise ValueError("At least one option is required")
    return options


class AttributeCreate(CamelModel):
    name: str
    options: List[str] = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return clean_name(value)

    @field_validator("options")
    @classmethod
    def validate_options(cls, value: List[str]) -> List[str]:
        return clean_options(value)


class AttributeUpdate(CamelModel):
    """Updatable attribute fields. Anything else in the payload is ignored."""

    name: Optional[str] = None
    options: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("Attribute name cannot be empty")
        return clean_name(value)

    @field_validator("options")
    @classmethod
    def validate_options(cls, value: Optional[List[str]]) -> List[str]:
        if value is None:
            raise ValueError("At least one option is required")
        return clean_options(value)


class AttributeRead(CamelModel):
    id: UUID
    name: str
    options: List[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttributeResponse(CamelModel):
    success: bool = True
    data: AttributeRead


class AttributeListResponse(CamelModel):
    success: bool = True
    count: int
    data: List[AttributeRead]
