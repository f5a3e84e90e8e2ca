from datetime import datetime, timezone
from typing import Dict, List, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog_api.core.exceptions import NotFoundException
from catalog_api.core.logging import get_logger
from catalog_api.models.attribute import Attribute
from catalog_api.models.product import Product
from catalog_api.models.product_attribute import ProductAttributeValue
from catalog_api.schemas.product import (
    AttributeSummary,
    ProductAttributeRead,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from catalog_api.services.catalog.attributes_service import attribute_service
from catalog_api.services.catalog.query_builder import ProductQuery
from catalog_api.services.catalog.validator import product_attribute_validator
from catalog_api.utils.ids import parse_id

logger = get_logger(__name__)

SCALAR_FIELDS = ("name", "title", "price", "status", "phone_number", "address", "images", "videos")


def _selection_rows(selections: Sequence[Tuple[UUID, List[str]]]) -> List[ProductAttributeValue]:
    rows: List[ProductAttributeValue] = []
    for position, (attribute_id, options) in enumerate(selections):
        for option_position, option in enumerate(options):
            rows.append(
                ProductAttributeValue(
                    attribute_id=attribute_id,
                    position=position,
                    option_position=option_position,
                    value=option,
                )
            )
    return rows


def _group_selections(product: Product) -> List[Tuple[UUID, List[str]]]:
    grouped: Dict[int, Tuple[UUID, List[str]]] = {}
    for row in sorted(product.attribute_values, key=lambda r: (r.position, r.option_position)):
        grouped.setdefault(row.position, (row.attribute_id, []))[1].append(row.value)
    return [grouped[position] for position in sorted(grouped)]


def to_product_read(product: Product, attributes: Dict[UUID, Attribute]) -> ProductRead:
    """Project a product row, joining attribute name/options for display."""
    entries = []
    for attribute_id, options in _group_selections(product):
        attribute = attributes.get(attribute_id)
        entries.append(
            ProductAttributeRead(
                attribute_id=attribute_id,
                selected_options=options,
                attribute=(
                    AttributeSummary(id=attribute.id, name=attribute.name, options=list(attribute.options or []))
                    if attribute is not None
                    else None
                ),
            )
        )
    return ProductRead(
        id=product.id,
        name=product.name,
        title=product.title,
        price=product.price,
        status=product.status,
        phone_number=product.phone_number,
        address=product.address,
        images=list(product.images or []),
        videos=list(product.videos or []),
        attributes=entries,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


class ProductService:
    """CRUD over products with attribute validation and display-time joins."""

    async def _serialize(self, db: AsyncSession, products: Sequence[Product]) -> List[ProductRead]:
        attribute_ids = {row.attribute_id for product in products for row in product.attribute_values}
        attributes = await attribute_service.get_attributes_by_ids(db, attribute_ids)
        return [to_product_read(product, attributes) for product in products]

    async def _load(self, db: AsyncSession, product_id: object) -> Product:
        parsed = parse_id(product_id)
        if parsed is None:
            raise NotFoundException("Product")
        stmt = (
            select(Product)
            .options(selectinload(Product.attribute_values))
            .where(Product.id == parsed)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFoundException("Product")
        return product

    async def list_products(self, db: AsyncSession, query: ProductQuery) -> Tuple[List[ProductRead], int]:
        where = query.where_clause()

        stmt = (
            select(Product)
            .options(selectinload(Product.attribute_values))
            .order_by(*query.order_by())
            .offset(query.skip)
            .limit(query.limit)
        )
        count_stmt = select(func.count()).select_from(Product)
        if where is not None:
            stmt = stmt.where(where)
            count_stmt = count_stmt.where(where)

        result = await db.execute(stmt)
        products = list(result.scalars().all())
        total = (await db.execute(count_stmt)).scalar_one()

        return await self._serialize(db, products), int(total)

    async def get_product(self, db: AsyncSession, product_id: object) -> ProductRead:
        product = await self._load(db, product_id)
        return (await self._serialize(db, [product]))[0]

    async def create_product(self, db: AsyncSession, payload: ProductCreate) -> ProductRead:
        # Validate before anything is added to the session
        selections = await product_attribute_validator.validate(db, payload.attributes)

        product = Product(
            name=payload.name,
            title=payload.title,
            price=payload.price,
            status=payload.status,
            phone_number=payload.phone_number,
            address=payload.address,
            images=list(payload.images),
            videos=list(payload.videos),
        )
        product.attribute_values = _selection_rows(selections)
        db.add(product)
        await db.commit()

        logger.info(f"Created product: {product.id} - {product.name}")
        return await self.get_product(db, product.id)

    async def update_product(self, db: AsyncSession, product_id: object, payload: ProductUpdate) -> ProductRead:
        product = await self._load(db, product_id)
        changes = payload.changes()

        selections = None
        if "attributes" in changes:
            selections = await product_attribute_validator.validate(db, changes["attributes"])

        for field in SCALAR_FIELDS:
            if field in changes:
                setattr(product, field, changes[field])
        if selections is not None:
            product.attribute_values = _selection_rows(selections)
        product.updated_at = datetime.now(timezone.utc)

        await db.commit()

        logger.info(f"Updated product: {product.id} - fields={sorted(changes)}")
        return await self.get_product(db, product.id)

    async def delete_product(self, db: AsyncSession, product_id: object) -> None:
        """Delete the product and its selections. Media blobs are left alone."""
        product = await self._load(db, product_id)
        await db.delete(product)
        await db.commit()
        logger.info(f"Deleted product: {product.id} - {product.name}")


product_service = ProductService()
