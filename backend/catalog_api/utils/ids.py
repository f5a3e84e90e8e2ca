from typing import Any, Optional
from uuid import UUID


def parse_id(value: Any) -> Optional[UUID]:
    """Parse an entity id, returning None when it is not a valid UUID."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        return None
