"""
Database base module - imports all models for Alembic migration detection.

This module imports all SQLAlchemy models to ensure they are registered
with Alembic for automatic migration generation. While the imports appear
unused, they are essential for the migration system to work properly.
"""

from storefront.auth.models.user import User
from storefront.catalog.models.category import Category
from storefront.catalog.models.product import Product
from storefront.db.session import Base
from storefront.orders.models.order import Order, OrderItem

# Export all models for Alembic
__all__ = [
    "Base",
    "User",
    "Category",
    "Product",
    "Order",
    "OrderItem",
]
