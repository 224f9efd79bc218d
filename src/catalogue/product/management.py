"""Product administration: price and availability changes.

Products themselves come from the seed (``catalogue.product.seed``); the
store only ever reprices them or takes them off sale.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier
from protean.utils.globals import current_domain

from catalogue.domain import catalogue, logger
from catalogue.product.product import Product
from shared.errors import not_found


@catalogue.command(part_of="Product")
class ChangeProductPrice:
    """Reprice a product. Existing orders keep the price they were placed at."""

    product_id: Identifier(required=True)
    price: Float(required=True)


@catalogue.command(part_of="Product")
class SetProductAvailability:
    product_id: Identifier(required=True)
    available: Boolean(required=True)


@catalogue.command_handler(part_of=Product)
class ManageProductsHandler:
    @handle(ChangeProductPrice)
    def change_price(self, command):
        repo = current_domain.repository_for(Product)
        product = _get(repo, command.product_id)
        old_price = product.unit_price
        product.change_price(command.price)
        repo.add(product)

        logger.info(
            "Product repriced",
            product_id=str(product.id),
            old_price=str(old_price),
            new_price=str(product.unit_price),
        )
        return str(product.id)

    @handle(SetProductAvailability)
    def set_availability(self, command):
        repo = current_domain.repository_for(Product)
        product = _get(repo, command.product_id)
        product.set_availability(command.available)
        repo.add(product)

        logger.info("Product availability changed", product_id=str(product.id), available=product.available)
        return str(product.id)


def _get(repo, product_id) -> Product:
    try:
        return repo.get(str(product_id))
    except ObjectNotFoundError as exc:
        raise not_found("product_id", f"Product {product_id} does not exist") from exc
