"""Catalogue reads used by the cart, order placement and the product API.

Callers may live in another context, so every read pushes the catalogue
domain context itself.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from catalogue.domain import catalogue
from catalogue.product.product import Product
from shared.errors import not_found


def get_product(product_id) -> Product:
    with catalogue.domain_context():
        try:
            return current_domain.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError as exc:
            raise not_found("product_id", f"Product {product_id} does not exist") from exc


def list_products(available_only: bool = False) -> list[Product]:
    with catalogue.domain_context():
        query = current_domain.repository_for(Product)._dao.query
        if available_only:
            query = query.filter(available=True)
        return sorted(query.limit(None).all().items, key=lambda product: product.name)


def count_products() -> int:
    with catalogue.domain_context():
        return current_domain.repository_for(Product)._dao.query.all().total
