from typing import Dict, List, Sequence, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.exceptions import InvalidAttributeException
from catalog_api.models.attribute import Attribute
from catalog_api.schemas.product import ProductAttributeIn
from catalog_api.services.catalog.attributes_service import attribute_service
from catalog_api.utils.ids import parse_id


class ProductAttributeValidator:
    """Checks a product's attribute references against the attribute store."""

    async def validate(
        self,
        db: AsyncSession,
        attribute_refs: Sequence[ProductAttributeIn],
    ) -> List[Tuple[UUID, List[str]]]:
        """Return the refs as ``(attribute_id, options)`` pairs.

        Raises :class:`InvalidAttributeException` for the first unknown
        attribute or non-member option, in payload order.
        """
        parsed_ids = [parse_id(ref.attribute_id) for ref in attribute_refs]
        known: Dict[UUID, Attribute] = await attribute_service.get_attributes_by_ids(db, parsed_ids)

        resolved: List[Tuple[UUID, List[str]]] = []
        for ref, attribute_id in zip(attribute_refs, parsed_ids):
            attribute = known.get(attribute_id) if attribute_id else None
            if attribute is None:
                raise InvalidAttributeException(ref.attribute_id)

            allowed = set(attribute.options or [])
            for option in ref.selected_options:
                if option not in allowed:
                    raise InvalidAttributeException(
                        str(attribute.id),
                        option=option,
                        attribute_name=attribute.name,
                    )
            resolved.append((attribute.id, list(ref.selected_options)))
        return resolved


product_attribute_validator = ProductAttributeValidator()
