"""Order history queries."""

from protean.utils.globals import current_domain

from identity.customer.provider import get_customer
from ordering.order.order import Order


def list_orders(customer_id) -> list[Order]:
    """The customer's orders, newest first."""
    get_customer(customer_id)
    return current_domain.repository_for(Order).for_customer(customer_id)


def get_order(order_id, customer_id) -> Order:
    return current_domain.repository_for(Order).owned_by(order_id, customer_id)


def is_first_time_customer(customer_id) -> bool:
    return current_domain.repository_for(Order).is_first_time_customer(customer_id)
