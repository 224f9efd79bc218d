"""Cart item management: commands, handler and the priced cart view.

Commands are submitted through ``submit()``, which holds the customer's cart
lock for the whole unit of work, so cart mutations never interleave with an
order placement for the same customer.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from catalogue.product.reader import get_product
from identity.customer.provider import get_customer
from ordering.cart.cart import Cart
from ordering.domain import ordering
from shared.locks import customer_locks
from shared.money import ZERO, round2

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1)


@ordering.command(part_of="Cart")
class UpdateCartItem:
    """A quantity of zero or less removes the line."""

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        get_customer(command.customer_id)
        product = get_product(command.product_id)
        if not product.available:
            raise ValidationError({"product_id": [f"Product {command.product_id} is not available"]})

        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        line = cart.add_or_replace(product_id=command.product_id, quantity=command.quantity)
        repo.add(cart)

        logger.info(
            "Cart item set",
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
            quantity=line.quantity,
        )
        return str(line.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        get_customer(command.customer_id)
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        line = cart.change_quantity(product_id=command.product_id, quantity=command.quantity)
        repo.add(cart)

        if line is None:
            logger.info(
                "Cart item removed by update",
                customer_id=str(command.customer_id),
                product_id=str(command.product_id),
            )
            return None

        logger.info(
            "Cart item quantity updated",
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
            quantity=line.quantity,
        )
        return str(line.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        get_customer(command.customer_id)
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        removed = cart.remove(command.product_id)
        repo.add(cart)

        logger.info(
            "Cart item removed",
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
            was_present=removed,
        )
        return removed

    @handle(ClearCart)
    def clear_cart(self, command):
        get_customer(command.customer_id)
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        removed = cart.clear()
        repo.add(cart)

        logger.info("Cart cleared", customer_id=str(command.customer_id), removed_count=removed)
        return removed


def submit(command):
    """Process a cart command while holding the customer's cart lock."""
    with customer_locks.hold(str(command.customer_id)):
        return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Priced view
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PricedLine:
    """A cart line joined with the product's current catalogue price."""

    id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def list_cart(customer_id) -> list[PricedLine]:
    """The customer's lines at current prices, in insertion order. Takes no lock."""
    get_customer(customer_id)
    try:
        cart = current_domain.repository_for(Cart).get(str(customer_id))
    except ObjectNotFoundError:
        return []

    lines = []
    for item in cart.lines:
        product = get_product(item.product_id)
        lines.append(
            PricedLine(
                id=str(item.id),
                product_id=str(item.product_id),
                product_name=product.name,
                quantity=item.quantity,
                unit_price=product.unit_price,
            )
        )
    return lines


def cart_subtotal(lines: list[PricedLine]) -> Decimal:
    return round2(sum((line.line_total for line in lines), ZERO))
