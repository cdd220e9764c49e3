from storefront.catalog.models.category import Category
from storefront.catalog.models.product import Product

__all__ = ["Category", "Product"]
