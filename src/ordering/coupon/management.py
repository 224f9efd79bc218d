"""Coupon administration: commands, handler and queries.

Administrative paths surface ``ObjectNotFoundError`` for unknown coupons
instead of the lenient "no discount" answer the checkout quote gives.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.coupon.coupon import Coupon, DiscountType
from ordering.coupon.engine import lookup
from ordering.domain import logger, ordering
from shared.errors import Conflict, not_found

_TERMS = (
    "description",
    "discount_type",
    "discount_value",
    "minimum_order_amount",
    "maximum_discount_amount",
    "start_date",
    "end_date",
    "usage_limit",
    "user_usage_limit",
    "active",
    "first_time_user_only",
    "free_shipping",
)


@ordering.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=50)
    description = String(max_length=200, default="")
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True)
    minimum_order_amount = Float()
    maximum_discount_amount = Float()
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    usage_limit = Integer()
    user_usage_limit = Integer(default=1)
    active = Boolean(default=True)
    first_time_user_only = Boolean(default=False)
    free_shipping = Boolean(default=False)


@ordering.command(part_of="Coupon")
class UpdateCoupon:
    """Replace a coupon's terms. The code cannot be changed."""

    coupon_id = Identifier(required=True)
    description = String(max_length=200, default="")
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True)
    minimum_order_amount = Float()
    maximum_discount_amount = Float()
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    usage_limit = Integer()
    user_usage_limit = Integer(default=1)
    active = Boolean(default=True)
    first_time_user_only = Boolean(default=False)
    free_shipping = Boolean(default=False)


@ordering.command(part_of="Coupon")
class DeleteCoupon:
    coupon_id = Identifier(required=True)


def _terms(command) -> dict:
    return {name: getattr(command, name) for name in _TERMS}


@ordering.command_handler(part_of=Coupon)
class ManageCouponsHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        coupon = Coupon.create(code=command.code, **_terms(command))

        repo = current_domain.repository_for(Coupon)
        if repo.find_by_code(coupon.code) is not None:
            raise Conflict({"code": [f"Coupon {coupon.code} already exists"]})
        repo.add(coupon)

        logger.info(
            "Coupon created", coupon_id=str(coupon.id), coupon_code=coupon.code, discount_type=coupon.discount_type
        )
        return str(coupon.id)

    @handle(UpdateCoupon)
    def update_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = _get(repo, command.coupon_id)
        coupon.revise(**_terms(command))
        repo.add(coupon)

        logger.info("Coupon updated", coupon_id=str(coupon.id), coupon_code=coupon.code)
        return str(coupon.id)

    @handle(DeleteCoupon)
    def delete_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = _get(repo, command.coupon_id)
        repo._dao.delete(coupon)

        logger.info("Coupon deleted", coupon_id=str(command.coupon_id), coupon_code=coupon.code)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def get_coupon(coupon_id) -> Coupon:
    return _get(current_domain.repository_for(Coupon), coupon_id)


def get_coupon_by_code(code: str) -> Coupon:
    return lookup(code)


def list_coupons() -> list[Coupon]:
    return current_domain.repository_for(Coupon).listing()


def list_active_coupons() -> list[Coupon]:
    return current_domain.repository_for(Coupon).listing(active=True)


def list_first_time_coupons() -> list[Coupon]:
    return current_domain.repository_for(Coupon).listing(active=True, first_time_user_only=True)


def _get(repo, coupon_id) -> Coupon:
    try:
        return repo.get(str(coupon_id))
    except ObjectNotFoundError as exc:
        raise not_found("coupon_id", f"Coupon {coupon_id} does not exist") from exc
