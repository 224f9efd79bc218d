"""FastAPI dependencies resolving the caller from the ``Authorization`` header."""

from typing import Annotated

from fastapi import Depends, Header

from identity.customer.customer import Customer
from identity.customer.provider import TokenIdentityProvider

_provider = TokenIdentityProvider()


def current_customer(authorization: Annotated[str | None, Header()] = None) -> Customer:
    return _provider.authenticate(authorization)


def current_admin(authorization: Annotated[str | None, Header()] = None) -> Customer:
    return _provider.authenticate_admin(authorization)


CurrentCustomer = Annotated[Customer, Depends(current_customer)]
CurrentAdmin = Annotated[Customer, Depends(current_admin)]
