"""Ordering bounded context: cart, coupons and order placement.

Placement turns a customer's cart into an order, redeems the coupon and
drains the cart in a single unit of work.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
