"""Cart aggregate: one per customer, holding at most one line per product.

Quantities are always >= 1; a quantity of zero is expressed by removing the
line. Adding a product that is already in the cart overwrites its quantity.
The cart never stores prices, those are read from the catalogue when the
cart is viewed or placed.
"""

from collections.abc import Mapping
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from ordering.domain import ordering
from shared.errors import Conflict, InvalidQuantity, not_found
from shared.timestamps import as_utc

_EPOCH = datetime.min.replace(tzinfo=UTC)


@ordering.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime(required=True)
    updated_at = DateTime()


@ordering.aggregate
class Cart:
    customer_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(item.product_id) for item in self.items or []]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in the cart"]})

    @classmethod
    def create(cls, customer_id):
        return cls(customer_id=str(customer_id), updated_at=datetime.now(UTC))

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    @property
    def lines(self) -> list[CartItem]:
        """Lines in the order they were first added."""
        return sorted(self.items or [], key=lambda item: (as_utc(item.added_at) or _EPOCH, str(item.id)))

    def line_for(self, product_id) -> CartItem | None:
        return next((item for item in self.items if str(item.product_id) == str(product_id)), None)

    def add_or_replace(self, product_id, quantity) -> CartItem:
        """Create the line, or overwrite the quantity of the existing one."""
        _check_quantity(quantity)
        now = datetime.now(UTC)

        line = self.line_for(product_id)
        if line is not None:
            line.quantity = quantity
            line.updated_at = now
        else:
            line = CartItem(product_id=str(product_id), quantity=quantity, added_at=now, updated_at=now)
            self.add_items(line)

        self.updated_at = now
        return line

    def change_quantity(self, product_id, quantity) -> CartItem | None:
        """Overwrite an existing line; a quantity of zero or less removes it."""
        if quantity <= 0:
            self.remove(product_id)
            return None

        line = self.line_for(product_id)
        if line is None:
            raise not_found("product_id", f"Product {product_id} is not in the cart")
        return self.add_or_replace(product_id, quantity)

    def remove(self, product_id) -> bool:
        line = self.line_for(product_id)
        if line is None:
            return False
        self.remove_items(line)
        self.updated_at = datetime.now(UTC)
        return True

    def clear(self) -> int:
        lines = list(self.items)
        for line in lines:
            self.remove_items(line)
        self.updated_at = datetime.now(UTC)
        return len(lines)

    def drain(self, snapshot: Mapping[str, int]) -> int:
        """Remove exactly the snapshotted lines (line id -> quantity).

        Raises ``Conflict`` when a line changed or disappeared since the
        snapshot was taken, or when lines were added meanwhile.
        """
        current = {str(item.id): item.quantity for item in self.items}
        if any(current.get(line_id) != quantity for line_id, quantity in snapshot.items()):
            raise Conflict({"cart": ["The cart changed while the order was being placed"]})
        if len(current) != len(snapshot):
            raise Conflict({"cart": ["Items were added to the cart while the order was being placed"]})
        return self.clear()


@ordering.repository(part_of=Cart)
class CartRepository:
    def for_customer(self, customer_id) -> Cart:
        """The customer's cart, or a new empty one when they never had one."""
        try:
            return self.get(str(customer_id))
        except ObjectNotFoundError:
            return Cart.create(customer_id)


def _check_quantity(quantity):
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
        raise InvalidQuantity({"quantity": ["Quantity must be a whole number of at least 1"]})

