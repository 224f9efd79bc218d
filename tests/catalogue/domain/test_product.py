from decimal import Decimal

import pytest
from protean.exceptions import ValidationError

from catalogue.product.product import Product


class TestProductCreation:
    def test_price_is_rounded_to_paise(self):
        product = Product.create(name="Cheese Makhana", price="279.005")
        assert product.unit_price == Decimal("279.01")

    def test_defaults(self):
        product = Product.create(name="Cheese Makhana", price=279)
        assert product.available is True
        assert product.stock_quantity is None
        assert product.in_stock
        assert product.created_at == product.updated_at

    @pytest.mark.parametrize("price", [0, -1, "-0.01", "0.004"])
    def test_price_must_be_positive(self, price):
        with pytest.raises(ValidationError) as exc:
            Product.create(name="Cheese Makhana", price=price)
        assert "price" in exc.value.messages

    def test_stock_cannot_be_negative(self):
        with pytest.raises(ValidationError) as exc:
            Product.create(name="Cheese Makhana", price=279, stock_quantity=-5)
        assert "stock_quantity" in exc.value.messages


class TestProductChanges:
    def test_change_price(self):
        product = Product.create(name="Puddina Makhana", price=289)
        product.change_price("299.50")
        assert product.unit_price == Decimal("299.50")

    def test_change_price_rejects_zero(self):
        product = Product.create(name="Puddina Makhana", price=289)
        with pytest.raises(ValidationError):
            product.change_price(0)
        assert product.unit_price == Decimal("289.00")

    def test_set_availability(self):
        product = Product.create(name="Puddina Makhana", price=289)
        product.set_availability(False)
        assert product.available is False

    def test_out_of_stock(self):
        assert not Product.create(name="Puddina Makhana", price=289, stock_quantity=0).in_stock
