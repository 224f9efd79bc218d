"""Identity provider: turns an opaque credential into a customer.

Other contexts call into here, so the identity domain context is pushed
for every read.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from identity.customer.customer import Customer, digest_token
from identity.domain import identity
from shared.errors import Forbidden, Unauthenticated, not_found

_BEARER_PREFIX = "bearer "


class TokenIdentityProvider:
    """Resolves access tokens issued at registration.

    Accepts either the raw token or an ``Authorization`` header value of the
    form ``Bearer <token>``.
    """

    def authenticate(self, credential: str | None) -> Customer:
        token = _extract_token(credential)
        if not token:
            raise Unauthenticated({"credential": ["Missing access token"]})

        with identity.domain_context():
            matches = (
                current_domain.repository_for(Customer)._dao.query.filter(token_digest=digest_token(token)).all().items
            )
        customer = next((c for c in matches if c.holds_token(token)), None)
        if customer is None:
            raise Unauthenticated({"credential": ["Invalid access token"]})
        return customer

    def authenticate_admin(self, credential: str | None) -> Customer:
        customer = self.authenticate(credential)
        if not customer.is_admin:
            raise Forbidden({"role": ["Administrator access required"]})
        return customer


def get_customer(customer_id) -> Customer:
    with identity.domain_context():
        try:
            return current_domain.repository_for(Customer).get(str(customer_id))
        except ObjectNotFoundError as exc:
            raise not_found("customer_id", f"Customer {customer_id} does not exist") from exc


def _extract_token(credential: str | None) -> str | None:
    if credential is None:
        return None
    credential = credential.strip()
    if credential.lower().startswith(_BEARER_PREFIX):
        credential = credential[len(_BEARER_PREFIX) :].strip()
    return credential or None
