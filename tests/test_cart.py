"""
Tests for cart models
"""

from decimal import Decimal

import pytest

from rocketcart.cart import CartItem, CartSnapshot, OperationResult, Outcome
from rocketcart.models import Product


class TestCartItem:
    """Tests for CartItem dataclass."""

    def test_create_cart_item(self):
        """Test creating a cart item."""
        item = CartItem(id=1, name="Tênis", price="179.90", amount=2)

        assert item.id == 1
        assert item.amount == 2
        assert item.price == Decimal("179.90")
        assert item.image_url is None

    def test_amount_below_one_rejected(self):
        """Test that a line can never hold less than one unit."""
        with pytest.raises(ValueError):
            CartItem(id=1, name="Tênis", price=10, amount=0)
        with pytest.raises(ValueError):
            CartItem(id=1, name="Tênis", price=10, amount=-5)

    def test_non_integer_fields_rejected(self):
        """Test that ids and amounts must be real integers."""
        with pytest.raises(TypeError):
            CartItem(id="1", name="Tênis", price=10)
        with pytest.raises(TypeError):
            CartItem(id=1, name="Tênis", price=10, amount=True)

    def test_item_is_immutable(self):
        """Test that presenters cannot mutate a line in place."""
        item = CartItem(id=1, name="Tênis", price=10)

        with pytest.raises(AttributeError):
            item.amount = 3

    def test_with_amount(self):
        """Test that with_amount returns a new line."""
        item = CartItem(id=1, name="Tênis", price=10)
        updated = item.with_amount(4)

        assert updated.amount == 4
        assert item.amount == 1

    def test_from_product(self):
        """Test building a line from catalog metadata."""
        product = Product(id=7, title="Tênis Adidas", price=219.9, image="https://img/7.jpg")
        item = CartItem.from_product(product)

        assert item.id == 7
        assert item.name == "Tênis Adidas"
        assert item.price == Decimal("219.9")
        assert item.image_url == "https://img/7.jpg"
        assert item.amount == 1

    def test_to_dict(self):
        """Test serialization to dict."""
        item = CartItem(id=1, name="Tênis", price="179.90", image_url="https://img/1.jpg", amount=2)

        assert item.to_dict() == {
            "id": 1,
            "name": "Tênis",
            "price": "179.90",
            "imageUrl": "https://img/1.jpg",
            "amount": 2,
        }

    def test_from_dict_storefront_shape(self):
        """Test deserialization of the storefront's title/image spelling."""
        data = {"id": 2, "title": "Tênis VR", "price": 139.9, "image": "https://img/2.jpg", "amount": 1}

        item = CartItem.from_dict(data)
        assert item.name == "Tênis VR"
        assert item.image_url == "https://img/2.jpg"
        assert item.price == Decimal("139.9")

    def test_from_dict_missing_name(self):
        """Test that a line without a name is rejected."""
        with pytest.raises(KeyError):
            CartItem.from_dict({"id": 1, "price": 10, "amount": 1})


class TestCartSnapshot:
    """Tests for CartSnapshot."""

    def test_create_empty_snapshot(self):
        """Test creating an empty snapshot."""
        snapshot = CartSnapshot()

        assert len(snapshot) == 0
        assert snapshot.version == 0
        assert snapshot.cart_size == 0
        assert snapshot.total_units == 0

    def test_duplicate_ids_rejected(self, make_item):
        """Test that a snapshot refuses two lines with the same id."""
        with pytest.raises(ValueError):
            CartSnapshot(items=(make_item(1), make_item(1, amount=2)))

    def test_lookup(self, make_item):
        """Test find and membership."""
        snapshot = CartSnapshot(items=(make_item(1), make_item(2, amount=3)))

        assert 1 in snapshot
        assert 9 not in snapshot
        assert snapshot.find(2).amount == 3
        assert snapshot.find(9) is None

    def test_sizes(self, make_item):
        """Test distinct count vs unit count."""
        snapshot = CartSnapshot(items=(make_item(1, amount=2), make_item(2, amount=3)))

        assert snapshot.cart_size == 2
        assert snapshot.total_units == 5

    def test_items_stored_as_tuple(self, make_item):
        """Test that a list passed in is frozen to a tuple."""
        snapshot = CartSnapshot(items=[make_item(1)])

        assert isinstance(snapshot.items, tuple)

    def test_derived_sequences_keep_order(self, make_item):
        """Test appended/replaced/removed preserve insertion order."""
        snapshot = CartSnapshot(items=(make_item(1), make_item(2), make_item(3)))

        assert [i.id for i in snapshot.appended(make_item(4))] == [1, 2, 3, 4]
        assert [i.amount for i in snapshot.replaced(2, 5)] == [1, 5, 1]
        assert [i.id for i in snapshot.removed(2)] == [1, 3]
        # Source snapshot untouched
        assert [i.amount for i in snapshot] == [1, 1, 1]


class TestOperationResult:
    """Tests for OperationResult flags."""

    @pytest.mark.parametrize(
        "outcome,ok,changed",
        [
            (Outcome.UPDATED, True, True),
            (Outcome.UNCHANGED, True, False),
            (Outcome.NOT_FOUND, False, False),
            (Outcome.OUT_OF_STOCK, False, False),
            (Outcome.FAILED, False, False),
        ],
    )
    def test_flags(self, outcome, ok, changed):
        result = OperationResult(outcome, CartSnapshot())

        assert result.ok is ok
        assert result.changed is changed
