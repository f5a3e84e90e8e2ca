from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.api.deps import read_body, require_capability
from catalog_api.core.security import Capability
from catalog_api.dependencies import get_db
from catalog_api.models.user import User
from catalog_api.schemas.attribute import (
    AttributeCreate,
    AttributeListResponse,
    AttributeRead,
    AttributeResponse,
    AttributeUpdate,
)
from catalog_api.schemas.common import MessageResponse
from catalog_api.services.catalog.attributes_service import attribute_service

router = APIRouter()

require_admin = require_capability(Capability.manage_catalog)


@router.get("", response_model=AttributeListResponse)
async def list_attributes(db: AsyncSession = Depends(get_db)) -> AttributeListResponse:
    attributes = await attribute_service.list_attributes(db)
    return AttributeListResponse(
        count=len(attributes),
        data=[AttributeRead.model_validate(attribute) for attribute in attributes],
    )


@router.get("/{attribute_id}", response_model=AttributeResponse)
async def get_attribute(attribute_id: str, db: AsyncSession = Depends(get_db)) -> AttributeResponse:
    attribute = await attribute_service.get_attribute(db, attribute_id)
    return AttributeResponse(data=AttributeRead.model_validate(attribute))


@router.post("", response_model=AttributeResponse, status_code=status.HTTP_201_CREATED)
async def create_attribute(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> AttributeResponse:
    payload = await read_body(request, AttributeCreate)
    attribute = await attribute_service.create_attribute(db, payload)
    return AttributeResponse(data=AttributeRead.model_validate(attribute))


@router.put("/{attribute_id}", response_model=AttributeResponse)
async def update_attribute(
    attribute_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> AttributeResponse:
    payload = await read_body(request, AttributeUpdate)
    attribute = await attribute_service.update_attribute(db, attribute_id, payload)
    return AttributeResponse(data=AttributeRead.model_validate(attribute))


@router.delete("/{attribute_id}", response_model=MessageResponse)
async def delete_attribute(
    attribute_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> MessageResponse:
    """
    Delete an attribute. Products referencing it are not touched and will
    show the entry with ``attribute: null``.
    """
    await attribute_service.delete_attribute(db, attribute_id)
    return MessageResponse(message="Attribute deleted successfully")
