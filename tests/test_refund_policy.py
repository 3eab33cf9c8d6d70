from decimal import Decimal
from types import SimpleNamespace

import pytest

from backoffice.models import OrderStatus
from backoffice.services.currency_service import (
    CurrencyInfo,
    Money,
    TAX_INCL_FORMAT,
    get_tax_format,
)
from backoffice.services.refund_policy import (
    compute_max_refund_amount,
    compute_refund_controls,
)

USD = CurrencyInfo(code='USD', symbol='$')


def _order(status, points_added=False):
    return SimpleNamespace(
        order_status_id=int(status),
        reward_points_were_added=points_added)


def _item(price):
    return SimpleNamespace(unit_price_incl_tax=Decimal(price))


@pytest.mark.parametrize('status,expected', [
    (OrderStatus.PENDING, True),
    (OrderStatus.PROCESSING, False),
    (OrderStatus.COMPLETE, False),
    (OrderStatus.CANCELLED, False),
])
def test_show_update_totals_only_until_pending(status, expected):
    controls = compute_refund_controls(_order(status), None, 1, USD)
    assert controls.show_update_totals is expected
    assert controls.update_totals is expected


@pytest.mark.parametrize('status,points_added,expected', [
    (OrderStatus.PENDING, True, False),
    (OrderStatus.PROCESSING, True, True),
    (OrderStatus.COMPLETE, True, True),
    (OrderStatus.COMPLETE, False, False),
])
def test_show_update_reward_points(status, points_added, expected):
    controls = compute_refund_controls(
        _order(status, points_added), None, 1, USD)
    assert controls.show_update_reward_points is expected
    assert controls.update_reward_points is points_added


def test_missing_order_disables_all_controls():
    controls = compute_refund_controls(None, None, 3, USD)
    assert controls.show_update_totals is False
    assert controls.show_update_reward_points is False
    assert controls.update_reward_points is False
    assert controls.max_refund_amount is None


def test_max_refund_amount_is_price_times_quantity():
    controls = compute_refund_controls(
        _order(OrderStatus.PENDING), _item('19.99'), 2, USD, TAX_INCL_FORMAT)
    money = controls.max_refund_amount
    assert money is not None
    assert money.amount == Decimal('39.98')
    assert money.currency == USD
    assert str(money) == '$39.98 incl. tax'


def test_max_refund_amount_without_order_still_computed():
    controls = compute_refund_controls(None, _item('5.00'), 3, USD)
    assert controls.max_refund_amount.amount == Decimal('15.00')


@pytest.mark.parametrize('price', ['0', '-4.50'])
def test_non_positive_refund_is_omitted(price):
    controls = compute_refund_controls(
        _order(OrderStatus.COMPLETE), _item(price), 2, USD)
    assert controls.max_refund_amount is None


def test_compute_max_refund_amount_clamps_to_zero():
    assert compute_max_refund_amount(_item('-1'), 2) == Decimal('0')
    assert compute_max_refund_amount(None, 2) == Decimal('0')


def test_money_formatting():
    money = Money(Decimal('1234.5'), USD)
    assert money.rounded_amount == Decimal('1234.50')
    assert str(money) == '$1,234.50'
    assert money.to_dict() == {
        'amount': '1234.50',
        'currency_code': 'USD',
        'formatted': '$1,234.50',
    }


def test_money_without_symbol_uses_code():
    money = Money(Decimal('10'), CurrencyInfo(code='EUR'), post_format=None)
    assert str(money) == '10.00 EUR'


def test_tax_format():
    assert get_tax_format(True, True) == TAX_INCL_FORMAT
    assert get_tax_format(True, False) == '{0} excl. tax'
    assert get_tax_format(False, True) is None
