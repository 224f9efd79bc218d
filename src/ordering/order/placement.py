"""Order placement: turns a customer's cart into an order in one unit of work.

Flow:
    1. Resolve the customer, snapshot the priced cart (empty cart is rejected)
    2. ``PlaceOrder`` carries the snapshot into the handler's unit of work
    3. Subtotal, then the coupon (if any) is validated strictly and priced
    4. The order and its lines are added
    5. Coupon usage is incremented (version-checked), the snapshotted lines drained
    6. The unit of work commits once, when the handler returns

Nothing is visible to other sessions before step 6. Any failure rolls the
unit of work back; a failure whose rollback cannot be confirmed is escalated
as ``ReconciliationRequired`` with enough context to repair by hand.

Placements for one customer are serialized, and placements redeeming the
same coupon are serialized on the coupon code. A conflict (the cart drifted
from its snapshot, a concurrent coupon redemption, or a uniqueness
violation) re-runs the whole attempt from a fresh snapshot, up to
``order_conflict_retries`` times.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from sqlalchemy.exc import IntegrityError

from identity.customer.provider import get_customer
from ordering.cart.cart import Cart
from ordering.cart.items import list_cart
from ordering.coupon.coupon import Coupon
from ordering.coupon.engine import lookup
from ordering.domain import ordering
from ordering.order.ledger import OrderLineSnapshot
from ordering.order.order import Order
from shared.config import get_settings
from shared.errors import Conflict, EmptyCart, Internal, InvalidCoupon, ReconciliationRequired
from shared.locks import coupon_locks, customer_locks, hold_all
from shared.money import ZERO, round2

logger = structlog.get_logger(__name__)

_DOMAIN_ERRORS = (ValidationError, ObjectNotFoundError, ExpectedVersionError)


@ordering.command(part_of="Order")
class PlaceOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    coupon_code = String(max_length=50)
    lines = Text(required=True)  # JSON: list of snapshotted cart lines


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = _decode_lines(command.lines)
        subtotal = round2(sum((line.line_total for line in lines), ZERO))
        now = datetime.now(UTC)

        orders = current_domain.repository_for(Order)
        coupon = None
        discount = ZERO
        if command.coupon_code:
            is_first_time_user = orders.is_first_time_customer(command.customer_id)
            coupon = _redeemable_coupon(command.customer_id, command.coupon_code, subtotal, is_first_time_user, now)
            discount = coupon.calculate_discount(subtotal, is_first_time_user, now)
        total = round2(max(ZERO, subtotal - discount))

        order = Order.place(
            id=command.order_id,
            customer_id=command.customer_id,
            lines=lines,
            subtotal=subtotal,
            discount=discount,
            total=total,
            placed_at=now,
            coupon_code=coupon.code if coupon is not None else None,
            free_shipping=coupon.grants_free_shipping if coupon is not None else False,
            currency=get_settings().currency,
        )
        orders.add(order)

        # Only once the order is added: redeem, then drain
        if coupon is not None:
            current_domain.repository_for(Coupon).increment_usage(coupon)

        carts = current_domain.repository_for(Cart)
        try:
            cart = carts.get(str(command.customer_id))
        except ObjectNotFoundError as exc:
            raise Conflict({"cart": ["The cart changed while the order was being placed"]}) from exc
        cart.drain({line.cart_item_id: line.quantity for line in lines})
        carts.add(cart)

        return str(order.id)


class OrderPlacement:
    """Application service in front of ``PlaceOrder``: locking, retries, failure policy."""

    def __init__(self, max_retries: int | None = None):
        self.max_retries = get_settings().order_conflict_retries if max_retries is None else max_retries

    def place(self, customer_id, coupon_code: str | None = None) -> Order:
        coupon_code = (coupon_code or "").strip() or None
        customer_id = str(get_customer(customer_id).id)

        with hold_all((customer_locks, customer_id), (coupon_locks, coupon_code)):
            attempt = 0
            while True:
                attempt += 1
                try:
                    order_id = self._attempt(customer_id, coupon_code)
                    break
                except ExpectedVersionError as exc:
                    if attempt > self.max_retries:
                        logger.warning(
                            "Order placement conflict, giving up",
                            customer_id=customer_id,
                            attempts=attempt,
                            error=str(exc),
                        )
                        raise
                    logger.info(
                        "Order placement conflict, retrying with a fresh cart snapshot",
                        customer_id=customer_id,
                        attempt=attempt,
                    )

        order = current_domain.repository_for(Order).get(order_id)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=customer_id,
            line_count=order.line_count,
            subtotal=str(order.subtotal_amount),
            discount=str(order.discount),
            total=str(order.total),
            coupon_code=order.coupon_code,
        )
        return order

    def _attempt(self, customer_id: str, coupon_code: str | None) -> str:
        priced = list_cart(customer_id)
        if not priced:
            raise EmptyCart({"cart": ["Cart is empty. Add items to cart before placing an order."]})

        command = PlaceOrder(
            order_id=str(uuid4()),
            customer_id=customer_id,
            coupon_code=coupon_code,
            lines=json.dumps(
                [
                    {
                        "cart_item_id": line.id,
                        "product_id": line.product_id,
                        "product_name": line.product_name,
                        "quantity": line.quantity,
                        "unit_price": str(line.unit_price),
                    }
                    for line in priced
                ]
            ),
        )

        try:
            return current_domain.process(command, asynchronous=False)
        except _DOMAIN_ERRORS:
            self._verify_rolled_back(command, len(priced))
            raise
        except Exception as exc:
            self._verify_rolled_back(command, len(priced))
            if _caused_by(exc, IntegrityError):
                raise Conflict({"order": ["A concurrent change conflicted with this order"]}) from exc
            logger.exception(
                "Order placement failed and was rolled back",
                customer_id=customer_id,
                coupon_code=coupon_code,
                line_count=len(priced),
            )
            raise Internal({"order": ["The order could not be placed"]}) from exc

    def _verify_rolled_back(self, command: PlaceOrder, line_count: int) -> None:
        """Escalate unless the failed attempt provably left no order behind."""
        try:
            recorded = current_domain.repository_for(Order).is_recorded(command.order_id)
        except Exception as exc:
            self._escalate(command, line_count, exc)
            raise ReconciliationRequired(
                {"order": ["The order could not be placed and has been flagged for review"]}
            ) from exc

        if recorded:
            self._escalate(command, line_count, None)
            raise ReconciliationRequired({"order": ["The order could not be placed and has been flagged for review"]})

    def _escalate(self, command: PlaceOrder, line_count: int, exc: Exception | None) -> None:
        logger.critical(
            "Rollback of order placement could not be confirmed, manual reconciliation required",
            order_id=str(command.order_id),
            customer_id=str(command.customer_id),
            coupon_code=command.coupon_code,
            line_count=line_count,
            exc_info=exc,
        )


def _redeemable_coupon(customer_id, code: str, subtotal, is_first_time_user: bool, now: datetime) -> Coupon:
    try:
        coupon = lookup(code)
    except ObjectNotFoundError as exc:
        raise InvalidCoupon({"coupon_code": [f"Coupon {code} does not exist"]}) from exc

    reason = coupon.unusable_reason(subtotal, is_first_time_user, now)
    if reason is not None:
        raise InvalidCoupon({"coupon_code": [reason]})

    if current_domain.repository_for(Order).redemptions(customer_id, coupon.code) >= coupon.user_usage_limit:
        raise InvalidCoupon({"coupon_code": [f"Coupon {coupon.code} has already been used on your orders"]})
    return coupon


def _decode_lines(payload: str) -> list[OrderLineSnapshot]:
    return [
        OrderLineSnapshot(
            cart_item_id=line["cart_item_id"],
            product_id=line["product_id"],
            product_name=line["product_name"],
            quantity=int(line["quantity"]),
            unit_price=Decimal(line["unit_price"]),
        )
        for line in json.loads(payload)
    ]


def _caused_by(exc: BaseException, exc_class: type[BaseException]) -> bool:
    while exc is not None:
        if isinstance(exc, exc_class):
            return True
        exc = exc.__cause__ or exc.__context__
    return False
