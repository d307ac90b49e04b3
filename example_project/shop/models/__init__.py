from .order import Order, OrderLine
from .product import Product
from .user import User

__all__ = ["Order", "OrderLine", "Product", "User"]
