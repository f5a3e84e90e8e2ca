from datetime import datetime, timezone
import uuid

from sqlalchemy import JSON, Column, DateTime, String, Uuid

from catalog_api.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Attribute(Base):
    """A named taxonomy with an ordered list of allowed option strings."""

    __tablename__ = "attributes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(50), nullable=False, unique=True, index=True)
    options = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
