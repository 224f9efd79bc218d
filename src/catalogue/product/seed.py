"""Default Pinaka Makhana products, inserted when the catalogue is empty."""

from protean.utils.globals import current_domain

from catalogue.domain import catalogue, logger
from catalogue.product.product import Product

DEFAULT_PRODUCTS = [
    {
        "sku": "PM-PP-100",
        "name": "Pinaka Peri Peri Makhana",
        "flavor": "Peri Peri",
        "description": "Spicy and crunchy peri peri flavored makhana - a perfect healthy snack",
        "price": "299.00",
        "stock_quantity": 150,
    },
    {
        "sku": "PM-CH-100",
        "name": "Pinaka Cheese Makhana",
        "flavor": "Cheese",
        "description": "Creamy cheese flavored makhana for the ultimate snacking experience",
        "price": "279.00",
        "stock_quantity": 120,
    },
    {
        "sku": "PM-PD-100",
        "name": "Pinaka Puddina Makhana",
        "flavor": "Mint (Puddina)",
        "description": "Refreshing mint flavored makhana for a cool and healthy snack",
        "price": "289.00",
        "stock_quantity": 100,
    },
    {
        "sku": "PM-CS-100",
        "name": "Pinaka Classic Salted Makhana",
        "flavor": "Classic Salted",
        "description": "Premium classic salted makhana - pure, healthy, and delicious",
        "price": "249.00",
        "stock_quantity": 200,
    },
]


def seed_products() -> int:
    """Insert the default products unless the catalogue already has some.

    Returns the number of products created.
    """
    with catalogue.domain_context():
        repo = current_domain.repository_for(Product)
        existing = repo._dao.query.all().total
        if existing:
            logger.info("Catalogue already populated, skipping seed", product_count=existing)
            return 0

        for data in DEFAULT_PRODUCTS:
            product = Product.create(**data)
            repo.add(product)
            logger.info("Seeded product", product_id=str(product.id), sku=product.sku, price=str(product.unit_price))

    return len(DEFAULT_PRODUCTS)
