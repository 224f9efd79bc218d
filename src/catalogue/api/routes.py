"""FastAPI endpoints for the Catalogue domain."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from catalogue.api.schemas import (
    ChangePriceRequest,
    ProductResponse,
    SetAvailabilityRequest,
)
from catalogue.product.management import ChangeProductPrice, SetProductAvailability
from catalogue.product.reader import get_product, list_products
from identity.api.dependencies import CurrentAdmin

product_router = APIRouter(prefix="/products", tags=["products"])


# --- Product endpoints ---


@product_router.get("", response_model=list[ProductResponse])
async def list_all_products(available_only: bool = False) -> list[ProductResponse]:
    return [ProductResponse.model_validate(p) for p in list_products(available_only=available_only)]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def product_detail(product_id: str) -> ProductResponse:
    return ProductResponse.model_validate(get_product(product_id))


@product_router.put("/{product_id}/price", response_model=ProductResponse)
async def change_price(product_id: str, body: ChangePriceRequest, admin: CurrentAdmin) -> ProductResponse:
    command = ChangeProductPrice(product_id=product_id, price=float(body.price))
    current_domain.process(command, asynchronous=False)
    return ProductResponse.model_validate(get_product(product_id))


@product_router.put("/{product_id}/availability", response_model=ProductResponse)
async def set_availability(product_id: str, body: SetAvailabilityRequest, admin: CurrentAdmin) -> ProductResponse:
    command = SetProductAvailability(product_id=product_id, available=body.available)
    current_domain.process(command, asynchronous=False)
    return ProductResponse.model_validate(get_product(product_id))
