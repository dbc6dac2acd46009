"""Calculator arithmetic and rounding."""
from decimal import Decimal

import pytest
from quotebook.services import PricingService
from quotebook.services.pricing_service import money, to_decimal

D = Decimal


def test_reference_example():
    b = PricingService.calculate(
        [{'quantity': 2, 'unit_price': '500'}],
        discount_percent='10', cgst_percent='9', sgst_percent='9', igst_percent='0',
        shipping_charges='50',
    )
    assert b.subtotal == D('1000')
    assert b.discount == D('100')
    assert b.taxable == D('900')
    assert b.cgst == D('81')
    assert b.sgst == D('81')
    assert b.igst == D('0')
    assert b.total == D('1112')


def test_subtotal_is_exact_sum_of_lines():
    items = [
        {'quantity': 3, 'unit_price': '0.10'},
        {'quantity': 7, 'unit_price': '19.99'},
        {'quantity': 1, 'unit_price': '0.01'},
    ]
    b = PricingService.calculate(items)
    assert b.subtotal == D('0.30') + D('139.93') + D('0.01')
    assert b.total == b.subtotal


def test_taxes_do_not_compound():
    b = PricingService.calculate(
        [{'quantity': 1, 'unit_price': '100'}], cgst_percent='9', sgst_percent='9', igst_percent='18',
    )
    assert b.cgst == D('9')
    assert b.sgst == D('9')
    assert b.igst == D('18')
    assert b.total == D('136')


def test_empty_items_gives_zero_totals_plus_shipping():
    b = PricingService.calculate([], discount_percent='10', cgst_percent='9', shipping_charges='25')
    assert b.subtotal == 0
    assert b.total == D('25')


@pytest.mark.parametrize('price,discount,cgst,sgst,igst,shipping', [
    ('333.33', '7.5', '9', '9', '0', '0'),
    ('0.07', '0', '2.5', '2.5', '0', '12.40'),
    ('12345.67', '12.345', '0', '0', '18', '99.99'),
    ('1', '33.3333', '6', '6', '0', '0'),
])
def test_rounded_breakdown_keeps_total_invariant(price, discount, cgst, sgst, igst, shipping):
    b = PricingService.calculate(
        [{'quantity': 3, 'unit_price': price}],
        discount_percent=discount, cgst_percent=cgst, sgst_percent=sgst, igst_percent=igst,
        shipping_charges=shipping,
    ).rounded()
    for value in b:
        assert value == value.quantize(D('0.01'))
    assert b.taxable == b.subtotal - b.discount
    assert b.total == b.taxable + b.cgst + b.sgst + b.igst + b.shipping_charges


def test_half_up_rounding():
    assert money('0.005') == D('0.01')
    assert money('2.675') == D('2.68')
    assert money(None) == D('0.00')


def test_to_decimal_avoids_float_noise():
    assert to_decimal(0.1) == D('0.1')
    assert to_decimal('') == 0


@pytest.mark.parametrize('discount,cgst,sgst,igst', [
    ('10', '9', '9', '0'),
    ('0', '0', '0', '18'),
    ('7.5', '2.5', '2.5', '0'),
    ('12.345', '6', '6', '0'),
])
def test_amounts_to_rates_round_trip(discount, cgst, sgst, igst):
    items = [{'quantity': 3, 'unit_price': '333.33'}, {'quantity': 1, 'unit_price': '49.95'}]
    stored = PricingService.calculate(
        items, discount_percent=discount, cgst_percent=cgst, sgst_percent=sgst, igst_percent=igst,
    ).rounded()
    rates = PricingService.rates_from_amounts(
        stored.subtotal, stored.discount, stored.cgst, stored.sgst, stored.igst,
    )
    again = PricingService.calculate(items, **rates).rounded()
    for field in ('subtotal', 'discount', 'cgst', 'sgst', 'igst', 'total'):
        assert abs(getattr(again, field) - getattr(stored, field)) <= D('0.01'), field


def test_rates_from_zero_base_are_zero():
    rates = PricingService.rates_from_amounts(0, 0, 0, 0, 0)
    assert rates == {
        'discount_percent': 0, 'cgst_percent': 0, 'sgst_percent': 0, 'igst_percent': 0,
    }
    # Full discount leaves nothing taxable
    rates = PricingService.rates_from_amounts('100', '100', '0', '0', '0')
    assert rates['discount_percent'] == D('100')
    assert rates['cgst_percent'] == 0
