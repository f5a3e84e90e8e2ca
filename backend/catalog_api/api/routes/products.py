from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.api.deps import read_body, require_capability
from catalog_api.core.config import settings
from catalog_api.core.security import Capability
from catalog_api.dependencies import get_db
from catalog_api.models.user import User
from catalog_api.schemas.common import MessageResponse
from catalog_api.schemas.product import ProductCreate, ProductListResponse, ProductResponse, ProductUpdate
from catalog_api.services.catalog.product_service import product_service
from catalog_api.services.catalog.query_builder import build_product_query

router = APIRouter()

require_admin = require_capability(Capability.manage_catalog)


@router.get("", response_model=ProductListResponse)
async def list_products(request: Request, db: AsyncSession = Depends(get_db)) -> ProductListResponse:
    """
    List products. Supports search, status, minPrice/maxPrice, attributes
    (JSON array of option strings), sortBy, page and limit query parameters.
    """
    query = build_product_query(request.query_params, default_limit=settings.PRODUCT_PAGE_SIZE)
    products, total = await product_service.list_products(db, query)
    return ProductListResponse(
        count=len(products),
        total=total,
        page=query.page,
        pages=query.pages(total),
        data=products,
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)) -> ProductResponse:
    return ProductResponse(data=await product_service.get_product(db, product_id))


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ProductResponse:
    payload = await read_body(request, ProductCreate)
    return ProductResponse(data=await product_service.create_product(db, payload))


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> ProductResponse:
    payload = await read_body(request, ProductUpdate)
    return ProductResponse(data=await product_service.update_product(db, product_id, payload))


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> MessageResponse:
    await product_service.delete_product(db, product_id)
    return MessageResponse(message="Product deleted successfully")
