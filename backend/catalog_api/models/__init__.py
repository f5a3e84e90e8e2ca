from .user import User
from .attribute import Attribute
from .product import Product, ProductStatus
from .product_attribute import ProductAttributeValue
