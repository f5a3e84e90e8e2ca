import re
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from catalog_api.models.product import ProductStatus
from catalog_api.schemas.common import CamelModel

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")

NAME_MAX_LENGTH = 100
TITLE_MAX_LENGTH = 200
ADDRESS_MAX_LENGTH = 200

# Fields that may not be cleared with an explicit null on update
NON_NULLABLE_FIELDS = ("name", "title", "price", "status", "images", "videos", "attributes")


def _required_text(value: Optional[str], label: str, max_length: int) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError(f"Product {label} is required")
    if len(value) > max_length:
        raise ValueError(f"Product {label} cannot be more than {max_length} characters")
    return value


def _optional_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not PHONE_PATTERN.match(value):
        raise ValueError("Please include a valid phone number")
    return value


def _optional_address(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) > ADDRESS_MAX_LENGTH:
        raise ValueError(f"Address cannot be more than {ADDRESS_MAX_LENGTH} characters")
    return value or None


def _media_urls(values: List[str]) -> List[str]:
    return [url.strip() for url in values if url and url.strip()]


class ProductAttributeIn(CamelModel):
    """Reference to an attribute plus the options chosen for this product."""

    attribute_id: str = Field(validation_alias=AliasChoices("attributeId", "attribute", "attribute_id"))
    selected_options: List[str] = Field(
        min_length=1,
        validation_alias=AliasChoices("selectedOptions", "selected_options"),
    )

    @field_validator("attribute_id", mode="before")
    @classmethod
    def coerce_attribute_id(cls, value: Any) -> Any:
        # Accept a populated attribute object as sent back by the read API
        if isinstance(value, dict):
            return value.get("id") or value.get("_id")
        if isinstance(value, UUID):
            return str(value)
        return value

    @field_validator("selected_options")
    @classmethod
    def dedupe_options(cls, values: List[str]) -> List[str]:
        seen: List[str] = []
        for value in values:
            value = value.strip()
            if not value:
                raise ValueError("Selected options cannot be empty strings")
            if value not in seen:
                seen.append(value)
        return seen


def _unique_attribute_refs(values: List[ProductAttributeIn]) -> List[ProductAttributeIn]:
    seen = set()
    for entry in values:
        key = entry.attribute_id.strip().lower()
        if key in seen:
            raise ValueError(f"Attribute {entry.attribute_id} is listed more than once")
        seen.add(key)
    return values


class ProductCreate(CamelModel):
    name: str
    title: str
    price: float = Field(..., ge=0, allow_inf_nan=False)
    status: ProductStatus = ProductStatus.active
    phone_number: Optional[str] = None
    address: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    videos: List[str] = Field(default_factory=list)
    attributes: List[ProductAttributeIn] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _required_text(value, "name", NAME_MAX_LENGTH)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _required_text(value, "title", TITLE_MAX_LENGTH)

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, value: Optional[str]) -> Optional[str]:
        return _optional_phone(value)

    @field_validator("address")
    @classmethod
    def validate_address(cls, value: Optional[str]) -> Optional[str]:
        return _optional_address(value)

    @field_validator("images", "videos")
    @classmethod
    def validate_media(cls, values: List[str]) -> List[str]:
        return _media_urls(values)

    @field_validator("attributes")
    @classmethod
    def validate_attributes(cls, values: List[ProductAttributeIn]) -> List[ProductAttributeIn]:
        return _unique_attribute_refs(values)


class ProductUpdate(CamelModel):
    """Whitelist of updatable product fields, checked like create.

    Keys outside this model are dropped. Omitted keys keep their stored value.
    """

    name: Optional[str] = None
    title: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    status: Optional[ProductStatus] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    images: Optional[List[str]] = None
    videos: Optional[List[str]] = None
    attributes: Optional[List[ProductAttributeIn]] = None

    @model_validator(mode="before")
    @classmethod
    def reject_null_required(cls, data: Any) -> Any:
        if isinstance(data, dict):
            for field in NON_NULLABLE_FIELDS:
                camel = to_camel(field)
                if (field in data and data[field] is None) or (camel in data and data[camel] is None):
                    raise ValueError(f"{camel} cannot be null")
        return data

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _required_text(value, "name", NAME_MAX_LENGTH)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _required_text(value, "title", TITLE_MAX_LENGTH)

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, value: Optional[str]) -> Optional[str]:
        return _optional_phone(value)

    @field_validator("address")
    @classmethod
    def validate_address(cls, value: Optional[str]) -> Optional[str]:
        return _optional_address(value)

    @field_validator("images", "videos")
    @classmethod
    def validate_media(cls, values: Optional[List[str]]) -> Optional[List[str]]:
        return None if values is None else _media_urls(values)

    @field_validator("attributes")
    @classmethod
    def validate_attributes(cls, values: Optional[List[ProductAttributeIn]]) -> Optional[List[ProductAttributeIn]]:
        return None if values is None else _unique_attribute_refs(values)

    def changes(self) -> Dict[str, Any]:
        """Fields the caller actually sent, keyed by column name."""
        return {field: getattr(self, field) for field in self.model_fields_set}


class AttributeSummary(CamelModel):
    id: UUID
    name: str
    options: List[str]


class ProductAttributeRead(CamelModel):
    attribute_id: UUID
    selected_options: List[str]
    attribute: Optional[AttributeSummary] = None  # None when the attribute was deleted


class ProductRead(CamelModel):
    id: UUID
    name: str
    title: str
    price: float
    status: ProductStatus
    phone_number: Optional[str] = None
    address: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    videos: List[str] = Field(default_factory=list)
    attributes: List[ProductAttributeRead] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductResponse(CamelModel):
    success: bool = True
    data: ProductRead


class ProductListResponse(CamelModel):
    success: bool = True
    count: int
    total: int
    page: int
    pages: int
    data: List[ProductRead]
