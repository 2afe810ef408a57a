from decimal import Decimal

import pydantic
import pytest

from bistro.models import OrderType
from bistro.schemas import CustomerCreate, OrderCreate, ProductCreate


def order_payload(**overrides):
    payload = {
        "order_type": "TAKEAWAY",
        "items": [{"product_id": 1, "quantity": 2, "price": 9.50}],
    }
    payload.update(overrides)
    return payload


def test_takeaway_without_table_is_accepted():
    order = OrderCreate(**order_payload(table_number=""))
    assert order.order_type == OrderType.TAKEAWAY
    assert order.table_number is None


def test_takeaway_discards_table_number():
    order = OrderCreate(**order_payload(table_number="5"))
    assert order.table_number is None


@pytest.mark.parametrize("table_number", [None, "", "   "])
def test_dine_in_without_table_is_rejected(table_number):
    with pytest.raises(pydantic.ValidationError, match="Table number is required"):
        OrderCreate(**order_payload(order_type="DINE_IN", table_number=table_number))


def test_dine_in_table_number_is_trimmed():
    order = OrderCreate(**order_payload(order_type="DINE_IN", table_number=" 12 "))
    assert order.table_number == "12"


def test_empty_items_rejected():
    with pytest.raises(pydantic.ValidationError):
        OrderCreate(**order_payload(items=[]))


@pytest.mark.parametrize("quantity", [0, -1])
def test_quantity_below_one_rejected(quantity):
    with pytest.raises(pydantic.ValidationError):
        OrderCreate(**order_payload(items=[{"product_id": 1, "quantity": quantity, "price": 1}]))


def test_negative_price_rejected():
    with pytest.raises(pydantic.ValidationError):
        OrderCreate(**order_payload(items=[{"product_id": 1, "quantity": 1, "price": -0.01}]))


def test_unknown_order_type_rejected():
    with pytest.raises(pydantic.ValidationError):
        OrderCreate(**order_payload(order_type="DELIVERY"))


def test_items_total_uses_exact_decimals():
    order = OrderCreate(**order_payload(items=[
        {"product_id": 1, "quantity": 3, "price": 0.10},
        {"product_id": 2, "quantity": 1, "price": 12.99},
    ]))
    assert order.items_total == Decimal("13.29")


def test_product_price_cannot_be_negative():
    with pytest.raises(pydantic.ValidationError):
        ProductCreate(name="Soup", price=-1, category_id=1)


def test_customer_email_is_normalized():
    assert CustomerCreate(email="John@Example.com").email == "john@example.com"
    assert CustomerCreate(email="").email is None
    with pytest.raises(pydantic.ValidationError):
        CustomerCreate(email="not-an-email")
