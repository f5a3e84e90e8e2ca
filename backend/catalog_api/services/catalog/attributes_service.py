from typing import Dict, Iterable, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.exceptions import DuplicateNameException, NotFoundException
from catalog_api.core.logging import get_logger
from catalog_api.models.attribute import Attribute
from catalog_api.schemas.attribute import AttributeCreate, AttributeUpdate
from catalog_api.utils.ids import parse_id

logger = get_logger(__name__)


class AttributeService:
    """CRUD over attribute definitions."""

    async def list_attributes(self, db: AsyncSession) -> List[Attribute]:
        stmt = select(Attribute).order_by(Attribute.created_at.desc(), Attribute.id.asc())
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_attribute(self, db: AsyncSession, attribute_id: object) -> Attribute:
        parsed = parse_id(attribute_id)
        attribute = await db.get(Attribute, parsed) if parsed else None
        if attribute is None:
            raise NotFoundException("Attribute")
        return attribute

    async def get_attributes_by_ids(
        self,
        db: AsyncSession,
        attribute_ids: Iterable[UUID],
    ) -> Dict[UUID, Attribute]:
        ids = {attribute_id for attribute_id in attribute_ids if attribute_id is not None}
        if not ids:
            return {}
        stmt = select(Attribute).where(Attribute.id.in_(ids))
        result = await db.execute(stmt)
        return {row.id: row for row in result.scalars().all()}

    async def _name_taken(self, db: AsyncSession, name: str) -> bool:
        # Case-sensitive match; the unique index is the real guard against races
        stmt = select(Attribute.id).where(Attribute.name == name)
        result = await db.execute(stmt)
        return result.first() is not None

    async def _commit(self, db: AsyncSession, name: str) -> None:
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning(f"Unique index rejected attribute name: {name}")
            raise DuplicateNameException(name)

    async def create_attribute(self, db: AsyncSession, payload: AttributeCreate) -> Attribute:
        if await self._name_taken(db, payload.name):
            raise DuplicateNameException(payload.name)

        attribute = Attribute(name=payload.name, options=list(payload.options))
        db.add(attribute)
        await self._commit(db, payload.name)
        await db.refresh(attribute)

        logger.info(f"Created attribute: {attribute.id} - {attribute.name}")
        return attribute

    async def update_attribute(
        self,
        db: AsyncSession,
        attribute_id: object,
        payload: AttributeUpdate,
    ) -> Attribute:
        attribute = await self.get_attribute(db, attribute_id)
        changes = payload.model_dump(exclude_unset=True)

        new_name = changes.get("name")
        if new_name is not None and new_name != attribute.name:
            if await self._name_taken(db, new_name):
                raise DuplicateNameException(new_name)
            attribute.name = new_name
        if "options" in changes:
            # Products keep their stored selections even if an option disappears
            attribute.options = list(changes["options"])

        await self._commit(db, attribute.name)
        await db.refresh(attribute)

        logger.info(f"Updated attribute: {attribute.id} - {attribute.name}")
        return attribute

    async def delete_attribute(self, db: AsyncSession, attribute_id: object) -> None:
        """Delete unconditionally. Products that reference it keep a dangling id."""
        attribute = await self.get_attribute(db, attribute_id)
        await db.delete(attribute)
        await db.commit()
        logger.info(f"Deleted attribute: {attribute.id} - {attribute.name}")


attribute_service = AttributeService()
