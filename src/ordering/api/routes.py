"""FastAPI endpoints for the Ordering domain: cart, orders and coupons."""

from fastapi import APIRouter, Response
from protean.utils.globals import current_domain

from identity.api.dependencies import CurrentAdmin, CurrentCustomer
from ordering.api.schemas import (
    AddToCartRequest,
    CartItemResponse,
    CartResponse,
    ClearedResponse,
    CouponDiscountResponse,
    CouponQuoteRequest,
    CouponResponse,
    CouponValidityResponse,
    CreateCouponRequest,
    OrderResponse,
    PlaceOrderRequest,
    RemovedResponse,
    UpdateCartItemRequest,
    UpdateCouponRequest,
)
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem, cart_subtotal, list_cart, submit
from ordering.coupon import engine as coupon_engine
from ordering.coupon.management import (
    CreateCoupon,
    DeleteCoupon,
    UpdateCoupon,
    get_coupon,
    get_coupon_by_code,
    list_active_coupons,
    list_coupons,
    list_first_time_coupons,
)
from ordering.order.history import get_order, is_first_time_customer, list_orders
from ordering.order.placement import OrderPlacement

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(customer_id) -> CartResponse:
    lines = list_cart(customer_id)
    return CartResponse(
        items=[CartItemResponse.model_validate(line) for line in lines],
        item_count=sum(line.quantity for line in lines),
        subtotal=cart_subtotal(lines),
    )


@cart_router.get("", response_model=CartResponse)
async def view_cart(customer: CurrentCustomer) -> CartResponse:
    return _cart_response(customer.id)


@cart_router.post("/items", status_code=201, response_model=CartItemResponse)
async def add_cart_item(body: AddToCartRequest, customer: CurrentCustomer) -> CartItemResponse:
    submit(AddToCart(customer_id=customer.id, product_id=body.product_id, quantity=body.quantity))
    line = next(line for line in list_cart(customer.id) if line.product_id == body.product_id)
    return CartItemResponse.model_validate(line)


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(product_id: str, body: UpdateCartItemRequest, customer: CurrentCustomer) -> CartResponse:
    submit(UpdateCartItem(customer_id=customer.id, product_id=product_id, quantity=body.quantity))
    return _cart_response(customer.id)


@cart_router.delete("/items/{product_id}", response_model=RemovedResponse)
async def remove_cart_item(product_id: str, customer: CurrentCustomer) -> RemovedResponse:
    return RemovedResponse(removed=submit(RemoveFromCart(customer_id=customer.id, product_id=product_id)))


@cart_router.delete("", response_model=ClearedResponse)
async def clear_cart(customer: CurrentCustomer) -> ClearedResponse:
    return ClearedResponse(removed_count=submit(ClearCart(customer_id=customer.id)))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, customer: CurrentCustomer) -> OrderResponse:
    order = OrderPlacement().place(customer.id, coupon_code=body.coupon_code)
    return OrderResponse.from_order(order)


@order_router.get("", response_model=list[OrderResponse])
async def order_history(customer: CurrentCustomer) -> list[OrderResponse]:
    return [OrderResponse.from_order(order) for order in list_orders(customer.id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def order_detail(order_id: str, customer: CurrentCustomer) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id, customer.id))


# ---------------------------------------------------------------------------
# Coupon Router
# ---------------------------------------------------------------------------
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


@coupon_router.get("/active", response_model=list[CouponResponse])
async def active_coupons() -> list[CouponResponse]:
    return [CouponResponse.model_validate(c) for c in list_active_coupons()]


@coupon_router.get("/first-time", response_model=list[CouponResponse])
async def first_time_coupons() -> list[CouponResponse]:
    return [CouponResponse.model_validate(c) for c in list_first_time_coupons()]


@coupon_router.get("/code/{code}", response_model=CouponResponse)
async def coupon_by_code(code: str) -> CouponResponse:
    return CouponResponse.model_validate(get_coupon_by_code(code))


@coupon_router.post("/validate", response_model=CouponValidityResponse)
async def validate_coupon(body: CouponQuoteRequest, customer: CurrentCustomer) -> CouponValidityResponse:
    first_time = _first_time(body, customer.id)
    valid = coupon_engine.validate_code(body.code, body.order_amount, first_time)
    return CouponValidityResponse(code=body.code, valid=valid)


@coupon_router.post("/calculate", response_model=CouponDiscountResponse)
async def calculate_coupon_discount(body: CouponQuoteRequest, customer: CurrentCustomer) -> CouponDiscountResponse:
    first_time = _first_time(body, customer.id)
    discount = coupon_engine.calculate_discount_for_code(body.code, body.order_amount, first_time)
    return CouponDiscountResponse(code=body.code, order_amount=body.order_amount, discount=discount)


def _first_time(body: CouponQuoteRequest, customer_id) -> bool:
    if body.is_first_time_user is not None:
        return body.is_first_time_user
    return is_first_time_customer(customer_id)


@coupon_router.get("", response_model=list[CouponResponse])
async def all_coupons(admin: CurrentAdmin) -> list[CouponResponse]:
    return [CouponResponse.model_validate(c) for c in list_coupons()]


@coupon_router.post("", status_code=201, response_model=CouponResponse)
async def create_coupon(body: CreateCouponRequest, admin: CurrentAdmin) -> CouponResponse:
    coupon_id = current_domain.process(CreateCoupon(**body.as_command_fields()), asynchronous=False)
    return CouponResponse.model_validate(get_coupon(coupon_id))


@coupon_router.get("/{coupon_id}", response_model=CouponResponse)
async def coupon_detail(coupon_id: str, admin: CurrentAdmin) -> CouponResponse:
    return CouponResponse.model_validate(get_coupon(coupon_id))


@coupon_router.put("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(coupon_id: str, body: UpdateCouponRequest, admin: CurrentAdmin) -> CouponResponse:
    current_domain.process(UpdateCoupon(coupon_id=coupon_id, **body.as_command_fields()), asynchronous=False)
    return CouponResponse.model_validate(get_coupon(coupon_id))


@coupon_router.delete("/{coupon_id}", status_code=204)
async def delete_coupon(coupon_id: str, admin: CurrentAdmin) -> Response:
    current_domain.process(DeleteCoupon(coupon_id=coupon_id), asynchronous=False)
    return Response(status_code=204)
