"""Pydantic request/response schemas for the Identity API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Request Schemas ---


class RegisterCustomerRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"name": "Asha Rao", "email": "asha@example.com"}]}}

    name: str = Field(..., max_length=255)
    email: str = Field(..., max_length=254)


# --- Response Schemas ---


class CustomerResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    name: str
    email: str
    role: str


class RegisteredCustomerResponse(CustomerResponse):
    """Returned once, at registration: the only time the token is shown."""

    access_token: str
