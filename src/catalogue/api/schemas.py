"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from shared.money import Money

# --- Product Request Schemas ---


class ChangePriceRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"price": "319.00"}]}}

    price: Decimal


class SetAvailabilityRequest(BaseModel):
    available: bool


# --- Response Schemas ---


class ProductResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    sku: str | None = None
    name: str
    flavor: str | None = None
    description: str | None = None
    price: Money
    available: bool
    in_stock: bool
