import pytest

from commerce_discounts.core.exceptions import InvalidArgumentType, StrategyNotFound
from commerce_discounts.models.enums.purchasable_scope import PurchasableScope
from commerce_discounts.services.discounts.amount_off import AmountOff
from commerce_discounts.services.discounts.buy_x_get_y import BuyXGetY
from commerce_discounts.services.discounts.discount_types import DiscountTypeRegistry

from helpers import make_discount, make_cart, make_line, purchasable


# --- AmountOff: percentage ---

def test_percentage_off_every_line():
    cart = make_cart(lines=[make_line(1, unit_price=1000, quantity=2), make_line(2, unit_price=499)])
    discount = make_discount(data={"percentage": 10})

    applied = AmountOff().apply(discount, cart)

    assert [cd.amount for cd in applied] == [200, 50]
    assert cart.discount_total == 250


def test_percentage_rounds_half_up():
    # 12.5% of 100 = 12.5 -> 13, 12.5% of 300 = 37.5 -> 38
    cart = make_cart(lines=[make_line(1, unit_price=100), make_line(2, unit_price=300)])

    applied = AmountOff().apply(make_discount(data={"percentage": "12.5"}), cart)

    assert [cd.amount for cd in applied] == [13, 38]


def test_percentage_limited_to_limitation_lines():
    cart = make_cart(lines=[make_line(1, purchasable_id=10), make_line(2, purchasable_id=20)])
    discount = make_discount(
        data={"percentage": 50},
        purchasables=[purchasable(PurchasableScope.limitation, 20)],
    )

    applied = AmountOff().apply(discount, cart)

    assert len(applied) == 1
    assert applied[0].target.purchasable_id == 20
    assert cart.lines[0].discount_total == 0


def test_condition_must_be_in_cart():
    discount = make_discount(purchasables=[purchasable(PurchasableScope.condition, 42)])

    assert AmountOff().apply(discount, make_cart(lines=[make_line(1)])) == []
    assert len(AmountOff().apply(discount, make_cart(lines=[make_line(1, purchasable_id=42)]))) == 1


def test_min_price_threshold():
    discount = make_discount(data={"percentage": 10, "min_prices": {"GBP": 20}})

    assert AmountOff().apply(discount, make_cart(lines=[make_line(unit_price=1999)])) == []
    assert len(AmountOff().apply(discount, make_cart(lines=[make_line(unit_price=2000)]))) == 1


# --- AmountOff: fixed ---

def test_fixed_amount_spread_across_lines():
    cart = make_cart(lines=[make_line(1, unit_price=1000), make_line(2, unit_price=3000)])
    discount = make_discount(data={"fixed_value": True, "fixed_values": {"GBP": 10}})

    applied = AmountOff().apply(discount, cart)

    assert [cd.amount for cd in applied] == [250, 750]
    assert cart.total == 3000


def test_fixed_amount_never_exceeds_cart():
    cart = make_cart(lines=[make_line(1, unit_price=300)])
    discount = make_discount(data={"fixed_value": True, "fixed_values": {"GBP": 10}})

    AmountOff().apply(discount, cart)

    assert cart.discount_total == 300
    assert cart.total == 0


def test_fixed_amount_needs_cart_currency():
    cart = make_cart(currency_code="EUR")
    discount = make_discount(data={"fixed_value": True, "fixed_values": {"GBP": 10}})

    assert AmountOff().apply(discount, cart) == []


def test_fixed_amount_smaller_than_line_count():
    cart = make_cart(lines=[make_line(i, unit_price=100) for i in range(1, 7)])
    discount = make_discount(data={"fixed_value": True, "fixed_values": {"GBP": "0.03"}})

    applied = AmountOff().apply(discount, cart)

    assert sum(cd.amount for cd in applied) == 3
    assert cart.discount_total == 3
    assert all(line.discount_total >= 0 for line in cart.lines)


def test_malformed_amounts_are_ignored():
    cart = make_cart(lines=[make_line(unit_price=1000)])

    bad_threshold = make_discount(data={"percentage": 10, "min_prices": {"GBP": "twenty"}})
    assert [cd.amount for cd in AmountOff().apply(bad_threshold, cart)] == [100]

    bad_value = make_discount(data={"fixed_value": True, "fixed_values": {"GBP": "NaN"}})
    assert AmountOff().apply(bad_value, make_cart(lines=[make_line(unit_price=1000)])) == []


def test_amount_off_validation():
    AmountOff().validate({"percentage": 100})
    AmountOff().validate({"fixed_value": True, "fixed_values": {"GBP": "2.50"}})

    for data in ({}, {"percentage": 0}, {"percentage": 101}, {"percentage": "ten"},
                 {"fixed_value": True}, {"fixed_value": True, "fixed_values": {"GBP": -1}}):
        with pytest.raises(ValueError):
            AmountOff().validate(data)


# --- BuyXGetY ---

def _bogof(**data):
    return make_discount(
        type="buy_x_get_y",
        data={"min_qty": 2, "reward_qty": 1, **data},
        purchasables=[
            purchasable(PurchasableScope.condition, 10),
            purchasable(PurchasableScope.reward, 20),
            purchasable(PurchasableScope.reward, 30),
        ],
    )


def test_buy_x_get_y_rewards_cheapest_first():
    cart = make_cart(lines=[
        make_line(1, purchasable_id=10, quantity=4, unit_price=500),
        make_line(2, purchasable_id=20, quantity=1, unit_price=800),
        make_line(3, purchasable_id=30, quantity=3, unit_price=200),
    ])

    applied = BuyXGetY().apply(_bogof(), cart)

    # 4 bought -> 2 free units, both from the 200 line
    assert [(cd.target.id, cd.amount) for cd in applied] == [(3, 400)]


def test_buy_x_get_y_respects_max_reward():
    cart = make_cart(lines=[
        make_line(1, purchasable_id=10, quantity=10, unit_price=500),
        make_line(2, purchasable_id=20, quantity=5, unit_price=100),
    ])

    applied = BuyXGetY().apply(_bogof(max_reward_qty=3), cart)

    assert sum(cd.amount for cd in applied) == 300


def test_buy_x_get_y_needs_enough_condition_units():
    cart = make_cart(lines=[
        make_line(1, purchasable_id=10, quantity=1, unit_price=500),
        make_line(2, purchasable_id=20, quantity=1, unit_price=100),
    ])

    assert BuyXGetY().apply(_bogof(), cart) == []


def test_buy_x_get_y_validation():
    BuyXGetY().validate({"min_qty": 2})
    with pytest.raises(ValueError):
        BuyXGetY().validate({"min_qty": 0})
    with pytest.raises(ValueError):
        BuyXGetY().validate({"min_qty": 2, "reward_qty": "many"})


# --- registry ---

def test_registry_resolves_by_identifier():
    registry = DiscountTypeRegistry([AmountOff, BuyXGetY()])

    assert isinstance(registry.resolve("amount_off"), AmountOff)
    assert "buy_x_get_y" in registry
    assert len(registry) == 2


def test_registry_replaces_same_identifier():
    registry = DiscountTypeRegistry([AmountOff])
    replacement = AmountOff()
    registry.add(replacement)

    assert registry.all() == [replacement]


def test_registry_rejects_non_types():
    with pytest.raises(InvalidArgumentType):
        DiscountTypeRegistry().add(object)


def test_registry_missing_type():
    with pytest.raises(StrategyNotFound):
        DiscountTypeRegistry().resolve("amount_off")
