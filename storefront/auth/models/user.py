import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from storefront.db.session import Base

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"


class User(Base):
    """
    User model for authentication and dashboard customer metrics.

    Attributes:
        id: Unique UUID primary key
        email: Unique email address (indexed for fast lookups)
        name: User's display name
        role: User role ("admin" or "customer")
        is_active: Whether the user account is active
        created_at: Account creation timestamp (UTC)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))

    role: Mapped[str] = mapped_column(String(50), default=ROLE_CUSTOMER, index=True)
    is_active: Mapped[bool] = mapped_column(default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), index=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
