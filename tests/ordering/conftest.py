import pytest

from ordering.domain import ordering


@pytest.fixture(autouse=True)
def ordering_context():
    with ordering.domain_context():
        yield
