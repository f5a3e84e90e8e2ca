from datetime import datetime, timezone
import enum
import uuid

from sqlalchemy import JSON, Column, DateTime, Enum, Float, String, Uuid
from sqlalchemy.orm import relationship

from catalog_api.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


class Product(Base):
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, index=True)
    title = Column(String(200), nullable=False, index=True)
    price = Column(Float, nullable=False, index=True)
    status = Column(Enum(ProductStatus, name="product_status"), nullable=False, default=ProductStatus.active)
    phone_number = Column(String(17), nullable=True)
    address = Column(String(200), nullable=True)
    images = Column(JSON, nullable=False, default=list)  # Public media URLs
    videos = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    attribute_values = relationship(
        "ProductAttributeValue",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="(ProductAttributeValue.position, ProductAttributeValue.option_position)",
    )
