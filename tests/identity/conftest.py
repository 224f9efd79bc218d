import pytest

from identity.domain import identity


@pytest.fixture(autouse=True)
def identity_context():
    with identity.domain_context():
        yield
