"""
ORM models package.

Importing this package registers every table with `Base.metadata`
(needed by Alembic autogenerate and `Database.create_all`).
"""

from rentmoment.models.category import Category
from rentmoment.models.merchant import Merchant
from rentmoment.models.order import Order
from rentmoment.models.product import Product
from rentmoment.models.user import User

__all__ = ["Category", "Merchant", "Order", "Product", "User"]
