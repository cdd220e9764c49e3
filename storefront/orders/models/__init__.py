from storefront.orders.models.order import REVENUE_STATUSES, Order, OrderItem, OrderStatus

__all__ = ["Order", "OrderItem", "OrderStatus", "REVENUE_STATUSES"]
