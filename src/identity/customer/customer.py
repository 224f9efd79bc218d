"""Customer aggregate: the authenticated principal that owns a cart and orders.

Credentials are opaque random access tokens. Only their SHA-256 digest is
stored; the raw token is handed out once, when it is issued.
"""

import hashlib
import hmac
import secrets
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, String

from identity.domain import identity


class CustomerRole(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


def digest_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@identity.aggregate
class Customer:
    name: String(required=True, max_length=255)
    email: String(required=True, max_length=254, unique=True)
    role: String(choices=CustomerRole, default=CustomerRole.CUSTOMER.value)
    token_digest: String(max_length=64, unique=True)
    registered_at: DateTime()

    @classmethod
    def register(cls, name, email, role=CustomerRole.CUSTOMER):
        if not name or not name.strip():
            raise ValidationError({"name": ["Name is required"]})
        if not email or "@" not in email:
            raise ValidationError({"email": ["A valid email address is required"]})

        return cls(
            name=name.strip(),
            email=email.strip().lower(),
            role=CustomerRole(role).value,
            registered_at=datetime.now(UTC),
        )

    def issue_token(self) -> str:
        """Replace the credential. Returns the raw token; only its digest is kept."""
        token = secrets.token_urlsafe(32)
        self.token_digest = digest_token(token)
        return token

    def holds_token(self, token: str) -> bool:
        if not self.token_digest or not token:
            return False
        return hmac.compare_digest(self.token_digest, digest_token(token))

    @property
    def is_admin(self) -> bool:
        return self.role == CustomerRole.ADMIN.value
