"""Application-wide constants.

This module centralizes magic numbers and configuration constants
that are used across multiple modules. For environment-specific
configuration, see config.py.
"""

# =============================================================================
# Pagination / List Defaults
# =============================================================================

# Maximum page size to prevent abuse
MAX_PAGE_SIZE: int = 100

# Default limit for rankings/top lists
DEFAULT_RANKINGS_LIMIT: int = 10

# Default limit for statistics lists (product report, recent orders)
DEFAULT_STATS_LIST_LIMIT: int = 20

# Top customers listed in customer analytics
TOP_CUSTOMERS_LIMIT: int = 10

# =============================================================================
# Inventory
# =============================================================================

# Products at or below this stock level (and above zero) are "low stock"
LOW_STOCK_THRESHOLD: int = 10

# Minimum restock recommendation and multiplier applied to current stock
MIN_RECOMMENDED_RESTOCK: int = 50
RESTOCK_MULTIPLIER: int = 5

# =============================================================================
# Labels
# =============================================================================

UNCATEGORIZED_LABEL: str = "Uncategorized"
GUEST_CUSTOMER_NAME: str = "Guest"
MISSING_VALUE_LABEL: str = "N/A"

# =============================================================================
# Caching
# =============================================================================

# Default cache TTL in seconds
DEFAULT_CACHE_TTL_SECONDS: int = 300  # 5 minutes

# Key namespace for cached dashboard reports
DASHBOARD_CACHE_PREFIX: str = "dashboard"
