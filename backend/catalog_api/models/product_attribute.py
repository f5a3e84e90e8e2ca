from sqlalchemy import BigInteger, Column, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import relationship

from catalog_api.db.base import Base


class ProductAttributeValue(Base):
    """One selected option of one attribute entry on a product.

    ``attribute_id`` is a weak reference: there is no foreign key, so deleting
    an attribute leaves these rows in place.
    """

    __tablename__ = "product_attribute_values"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    attribute_id = Column(Uuid, nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # entry order within the product
    option_position = Column(Integer, nullable=False, default=0)
    value = Column(Text, nullable=False, index=True)

    product = relationship("Product", back_populates="attribute_values")
