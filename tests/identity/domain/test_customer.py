import pytest
from protean.exceptions import ValidationError

from identity.customer.customer import Customer, CustomerRole, digest_token


class TestCustomerRegistration:
    def test_register_normalizes_email(self):
        customer = Customer.register(name="Asha Rao", email="Asha@Example.com ")
        assert customer.email == "asha@example.com"
        assert customer.role == CustomerRole.CUSTOMER.value
        assert customer.registered_at is not None

    def test_name_required(self):
        with pytest.raises(ValidationError) as exc:
            Customer.register(name="  ", email="a@example.com")
        assert "name" in exc.value.messages

    def test_email_must_look_like_an_email(self):
        with pytest.raises(ValidationError) as exc:
            Customer.register(name="A", email="not-an-email")
        assert "email" in exc.value.messages


class TestAccessToken:
    def test_only_the_digest_is_kept(self):
        customer = Customer.register(name="A", email="a@example.com")
        token = customer.issue_token()

        assert len(token) >= 32
        assert customer.token_digest == digest_token(token)
        assert token not in customer.to_dict().values()

    def test_holds_token(self):
        customer = Customer.register(name="A", email="a@example.com")
        token = customer.issue_token()

        assert customer.holds_token(token)
        assert not customer.holds_token(token + "x")
        assert not customer.holds_token("")

    def test_no_token_issued_yet(self):
        assert not Customer.register(name="A", email="a@example.com").holds_token("anything")

    def test_reissue_replaces_the_credential(self):
        customer = Customer.register(name="A", email="a@example.com")
        old = customer.issue_token()
        new = customer.issue_token()

        assert new != old
        assert customer.holds_token(new)
        assert not customer.holds_token(old)

    def test_digest_is_sha256_hex(self):
        assert digest_token("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


class TestCustomerRole:
    def test_admin(self):
        assert Customer.register(name="A", email="a@example.com", role=CustomerRole.ADMIN).is_admin

    def test_customer_is_not_admin(self):
        assert not Customer.register(name="A", email="a@example.com").is_admin
