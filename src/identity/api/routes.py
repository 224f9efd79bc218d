"""FastAPI endpoints for the Identity domain."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from identity.api.dependencies import CurrentCustomer
from identity.api.schemas import CustomerResponse, RegisteredCustomerResponse, RegisterCustomerRequest
from identity.customer.provider import get_customer
from identity.customer.registration import RegisterCustomer

router = APIRouter(prefix="/customers", tags=["customers"])


@router.post("", status_code=201, response_model=RegisteredCustomerResponse)
async def register_customer(body: RegisterCustomerRequest) -> RegisteredCustomerResponse:
    # Self-registration always creates a regular customer; admins come from manage.py
    registration = current_domain.process(RegisterCustomer(name=body.name, email=body.email), asynchronous=False)
    customer = get_customer(registration.customer_id)
    return RegisteredCustomerResponse(
        **CustomerResponse.model_validate(customer).model_dump(),
        access_token=registration.access_token,
    )


@router.get("/me", response_model=CustomerResponse)
async def who_am_i(customer: CurrentCustomer) -> CustomerResponse:
    return CustomerResponse.model_validate(customer)
