"""Range-scoped aggregate queries over orders, products and users.

Every method is a point-in-time read. Query errors propagate unchanged;
nothing here retries.
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload, selectinload

from storefront.auth.models.user import ROLE_CUSTOMER, User
from storefront.catalog.models.category import Category
from storefront.catalog.models.product import Product
from storefront.dashboard.services.statistics.base import DateRange
from storefront.orders.models.order import REVENUE_STATUSES, Order, OrderItem, OrderStatus


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _status_value(status: OrderStatus | str) -> str:
    return status.value if isinstance(status, OrderStatus) else str(status)


@dataclass(frozen=True)
class ProductSales:
    product: Product
    category_name: str | None
    units_sold: int
    revenue: Decimal


@dataclass(frozen=True)
class CategorySales:
    category: Category
    product_count: int
    average_price: Decimal
    units_sold: int
    revenue: Decimal


@dataclass(frozen=True)
class CustomerRevenue:
    user: User
    order_count: int
    revenue: Decimal


class MetricAggregator:
    """Issues the aggregate queries behind every dashboard report."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _bounds(date_range: DateRange) -> tuple[datetime, datetime]:
        return date_range.start.astimezone(UTC), date_range.end.astimezone(UTC)

    def _created_in(self, column: Any, date_range: DateRange) -> Any:
        start, end = self._bounds(date_range)
        return column.between(start, end)

    # ============ Orders ============

    def sum_revenue(self, date_range: DateRange) -> Decimal:
        """Sum order totals in range, counting completed, shipped and processing orders."""
        total = (
            self.db.query(func.coalesce(func.sum(Order.total_price), 0))
            .filter(
                self._created_in(Order.created_at, date_range),
                Order.status.in_(REVENUE_STATUSES),
            )
            .scalar()
        )
        return _to_decimal(total)

    def revenue_and_count(self, date_range: DateRange) -> tuple[Decimal, int]:
        """Get revenue and number of revenue-eligible orders in range."""
        result = (
            self.db.query(func.coalesce(func.sum(Order.total_price), 0), func.count(Order.id))
            .filter(
                self._created_in(Order.created_at, date_range),
                Order.status.in_(REVENUE_STATUSES),
            )
            .first()
        )
        if result is None:
            return Decimal("0"), 0
        return _to_decimal(result[0]), result[1] or 0

    def count_orders(self, date_range: DateRange, status: OrderStatus | None = None) -> int:
        query = self.db.query(func.count(Order.id)).filter(
            self._created_in(Order.created_at, date_range)
        )
        if status is not None:
            query = query.filter(Order.status == status)
        return query.scalar() or 0

    def count_orders_by_status(self, date_range: DateRange) -> dict[str, int]:
        """Count orders in range per status; every known status is present."""
        counts = {status.value: 0 for status in OrderStatus}
        rows = (
            self.db.query(Order.status, func.count(Order.id))
            .filter(self._created_in(Order.created_at, date_range))
            .group_by(Order.status)
            .all()
        )
        for status, count in rows:
            counts[_status_value(status)] = count
        return counts

    def order_rows(
        self,
        date_range: DateRange,
        statuses: tuple[OrderStatus, ...] | None = None,
    ) -> list[tuple[datetime, Decimal]]:
        """(created_at, total_price) of orders in range, oldest first."""
        query = self.db.query(Order.created_at, Order.total_price).filter(
            self._created_in(Order.created_at, date_range)
        )
        if statuses is not None:
            query = query.filter(Order.status.in_(statuses))
        return [
            (created_at, _to_decimal(total))
            for created_at, total in query.order_by(Order.created_at).all()
        ]

    def recent_orders(self, limit: int, status: OrderStatus | None = None) -> list[Order]:
        query = self.db.query(Order).options(
            joinedload(Order.user), selectinload(Order.items)
        )
        if status is not None:
            query = query.filter(Order.status == status)
        return query.order_by(Order.created_at.desc()).limit(limit).all()

    # ============ Users ============

    def count_users(self, role: str | None = ROLE_CUSTOMER) -> int:
        query = self.db.query(func.count(User.id))
        if role is not None:
            query = query.filter(User.role == role)
        return query.scalar() or 0

    def count_new_users(self, date_range: DateRange, role: str | None = ROLE_CUSTOMER) -> int:
        """Count users created in range; ``role=None`` counts every role."""
        query = self.db.query(func.count(User.id)).filter(
            self._created_in(User.created_at, date_range)
        )
        if role is not None:
            query = query.filter(User.role == role)
        return query.scalar() or 0

    def count_active_users(self, date_range: DateRange) -> int:
        """Count customers who placed at least one order in range."""
        return (
            self.db.query(func.count(func.distinct(Order.user_id)))
            .select_from(Order)
            .join(User, User.id == Order.user_id)
            .filter(
                User.role == ROLE_CUSTOMER,
                self._created_in(Order.created_at, date_range),
            )
            .scalar()
            or 0
        )

    def customer_order_counts(self, date_range: DateRange) -> dict[uuid.UUID, int]:
        """Orders placed in range per customer."""
        rows = (
            self.db.query(Order.user_id, func.count(Order.id))
            .select_from(Order)
            .join(User, User.id == Order.user_id)
            .filter(
                User.role == ROLE_CUSTOMER,
                self._created_in(Order.created_at, date_range),
            )
            .group_by(Order.user_id)
            .all()
        )
        return {user_id: count for user_id, count in rows}

    def customer_signups(self, date_range: DateRange) -> list[datetime]:
        rows = (
            self.db.query(User.created_at)
            .filter(
                User.role == ROLE_CUSTOMER,
                self._created_in(User.created_at, date_range),
            )
            .order_by(User.created_at)
            .all()
        )
        return [created_at for (created_at,) in rows]

    def top_customers(self, date_range: DateRange, limit: int) -> list[CustomerRevenue]:
        revenue = func.coalesce(func.sum(Order.total_price), 0)
        rows = (
            self.db.query(User, func.count(Order.id), revenue)
            .join(Order, Order.user_id == User.id)
            .filter(
                User.role == ROLE_CUSTOMER,
                Order.status.in_(REVENUE_STATUSES),
                self._created_in(Order.created_at, date_range),
            )
            .group_by(User.id)
            .order_by(revenue.desc(), User.name)
            .limit(limit)
            .all()
        )
        return [
            CustomerRevenue(user=user, order_count=count, revenue=_to_decimal(total))
            for user, count, total in rows
        ]

    # ============ Products ============

    def count_products_by_stock_band(self, low_stock_threshold: int = 10) -> dict[str, int]:
        """Classify every product into exactly one stock band.

        out_of_stock: stock <= 0; low_stock: 1..threshold; in_stock: above threshold.
        """
        stock = Product.stock_quantity
        total, in_stock, low_stock, out_of_stock = (
            self.db.query(
                func.count(Product.id),
                func.sum(case((stock > low_stock_threshold, 1), else_=0)),
                func.sum(case(((stock >= 1) & (stock <= low_stock_threshold), 1), else_=0)),
                func.sum(case((stock <= 0, 1), else_=0)),
            ).one()
        )
        return {
            "total": total or 0,
            "in_stock": in_stock or 0,
            "low_stock": low_stock or 0,
            "out_of_stock": out_of_stock or 0,
        }

    def total_product_views(self) -> int:
        return self.db.query(func.coalesce(func.sum(Product.view_count), 0)).scalar() or 0

    def units_sold(self, date_range: DateRange) -> int:
        """Units sold on orders in range, excluding cancelled orders."""
        return (
            self.db.query(func.coalesce(func.sum(OrderItem.quantity), 0))
            .select_from(OrderItem)
            .join(Order, Order.id == OrderItem.order_id)
            .filter(
                self._created_in(Order.created_at, date_range),
                Order.status != OrderStatus.CANCELLED,
            )
            .scalar()
            or 0
        )

    def _sales_subquery(self, date_range: DateRange) -> Any:
        return (
            self.db.query(
                OrderItem.product_id.label("product_id"),
                func.sum(OrderItem.quantity).label("units"),
                func.sum(OrderItem.quantity * OrderItem.price).label("revenue"),
            )
            .select_from(OrderItem)
            .join(Order, Order.id == OrderItem.order_id)
            .filter(
                self._created_in(Order.created_at, date_range),
                Order.status != OrderStatus.CANCELLED,
            )
            .group_by(OrderItem.product_id)
            .subquery()
        )

    def product_sales(
        self,
        date_range: DateRange,
        sort: str = "revenue",
        limit: int = 20,
        category_id: uuid.UUID | None = None,
    ) -> list[ProductSales]:
        """Products with units sold and revenue in range (non-cancelled orders).

        Args:
            sort: 'revenue', 'sales' (units), 'views' or 'stock'; unknown
                values sort by revenue. 'stock' lists the lowest stock first.
        """
        sales = self._sales_subquery(date_range)
        units = func.coalesce(sales.c.units, 0)
        revenue = func.coalesce(sales.c.revenue, 0)

        query = (
            self.db.query(Product, Category.name, units, revenue)
            .outerjoin(Category, Category.id == Product.category_id)
            .outerjoin(sales, sales.c.product_id == Product.id)
        )
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)

        if sort == "sales":
            ordering = units.desc()
        elif sort == "views":
            ordering = Product.view_count.desc()
        elif sort == "stock":
            ordering = Product.stock_quantity.asc()
        else:
            ordering = revenue.desc()

        rows = query.order_by(ordering, Product.name).limit(limit).all()
        return [
            ProductSales(
                product=product,
                category_name=category_name,
                units_sold=int(units_sold or 0),
                revenue=_to_decimal(product_revenue),
            )
            for product, category_name, units_sold, product_revenue in rows
        ]

    def low_stock_products(
        self, threshold: int, category_id: uuid.UUID | None = None
    ) -> list[tuple[Product, str | None]]:
        """Products with 0 < stock <= threshold, lowest stock first."""
        query = (
            self.db.query(Product, Category.name)
            .outerjoin(Category, Category.id == Product.category_id)
            .filter(Product.stock_quantity <= threshold, Product.stock_quantity > 0)
        )
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        rows = query.order_by(Product.stock_quantity.asc(), Product.name).all()
        return [(product, category_name) for product, category_name in rows]

    def category_distribution(self) -> list[tuple[str | None, int]]:
        """Product count per category; uncategorized products share a None key."""
        rows = (
            self.db.query(Category.name, func.count(Product.id))
            .select_from(Product)
            .outerjoin(Category, Category.id == Product.category_id)
            .group_by(Category.name)
            .order_by(func.count(Product.id).desc())
            .all()
        )
        return [(name, count) for name, count in rows]

    def revenue_by_category(self, date_range: DateRange) -> list[tuple[str | None, Decimal]]:
        """Line-item revenue per category for revenue-eligible orders in range."""
        revenue = func.sum(OrderItem.quantity * OrderItem.price)
        rows = (
            self.db.query(Category.name, revenue)
            .select_from(OrderItem)
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .outerjoin(Category, Category.id == Product.category_id)
            .filter(
                self._created_in(Order.created_at, date_range),
                Order.status.in_(REVENUE_STATUSES),
            )
            .group_by(Category.name)
            .order_by(revenue.desc())
            .all()
        )
        return [(name, _to_decimal(total)) for name, total in rows]

    def category_sales(self, date_range: DateRange) -> list[CategorySales]:
        """Catalog size, average price, units sold and revenue per category."""
        catalog = {
            category_id: (count, _to_decimal(avg_price))
            for category_id, count, avg_price in self.db.query(
                Product.category_id, func.count(Product.id), func.avg(Product.price)
            )
            .group_by(Product.category_id)
            .all()
        }
        sold = {
            category_id: (int(units or 0), _to_decimal(revenue))
            for category_id, units, revenue in self.db.query(
                Product.category_id,
                func.sum(OrderItem.quantity),
                func.sum(OrderItem.quantity * OrderItem.price),
            )
            .select_from(OrderItem)
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .filter(
                self._created_in(Order.created_at, date_range),
                Order.status != OrderStatus.CANCELLED,
            )
            .group_by(Product.category_id)
            .all()
        }

        results = []
        for category in self.db.query(Category).order_by(Category.name).all():
            product_count, average_price = catalog.get(category.id, (0, Decimal("0")))
            units_sold, revenue = sold.get(category.id, (0, Decimal("0")))
            results.append(
                CategorySales(
                    category=category,
                    product_count=product_count,
                    average_price=average_price,
                    units_sold=units_sold,
                    revenue=revenue,
                )
            )
        return results
