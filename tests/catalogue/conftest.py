import pytest

from catalogue.domain import catalogue


@pytest.fixture(autouse=True)
def catalogue_context():
    with catalogue.domain_context():
        yield
