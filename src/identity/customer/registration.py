"""Customer registration: command and handler."""

from dataclasses import dataclass

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from identity.customer.customer import Customer, CustomerRole
from identity.domain import identity, logger
from shared.errors import Conflict


@identity.command(part_of="Customer")
class RegisterCustomer:
    """Create a customer account and issue its access credential."""

    name: String(required=True, max_length=255)
    email: String(required=True, max_length=254)
    role: String(choices=CustomerRole, default=CustomerRole.CUSTOMER.value)


@dataclass(frozen=True)
class Registration:
    customer_id: str
    access_token: str


@identity.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command) -> Registration:
        customer = Customer.register(name=command.name, email=command.email, role=command.role)

        repo = current_domain.repository_for(Customer)
        if repo._dao.query.filter(email=customer.email).all().total:
            raise Conflict({"email": ["A customer with this email already exists"]})

        token = customer.issue_token()
        repo.add(customer)

        logger.info("Customer registered", customer_id=str(customer.id), role=customer.role)
        return Registration(customer_id=str(customer.id), access_token=token)
