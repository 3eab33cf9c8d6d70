from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from backoffice.models import OrderStatus
from backoffice.services.currency_service import CurrencyInfo, Money


@dataclass(frozen=True)
class RefundControls:
    show_update_totals: bool = False
    update_totals: bool = False
    show_update_reward_points: bool = False
    update_reward_points: bool = False
    max_refund_amount: Optional[Money] = None


def compute_max_refund_amount(order_item, quantity) -> Decimal:
    if order_item is None:
        return Decimal('0')
    unit_price = Decimal(order_item.unit_price_incl_tax or 0)
    return max(unit_price * int(quantity or 0), Decimal('0'))


def compute_refund_controls(
        order,
        order_item,
        quantity,
        currency: CurrencyInfo,
        tax_format: Optional[str] = None) -> RefundControls:
    """Derive the accept-form defaults for one return request.

    Totals stay editable only while the order has not moved past
    PENDING. Reward points can be adjusted only after that, and only
    if points were granted for the order. The maximum refund is
    omitted unless it is strictly positive.
    """
    show_update_totals = False
    show_update_reward_points = False
    update_reward_points = False

    if order is not None:
        pending = int(OrderStatus.PENDING)
        points_added = bool(order.reward_points_were_added)
        update_reward_points = points_added
        show_update_totals = order.order_status_id <= pending
        show_update_reward_points = (
            order.order_status_id > pending and points_added)

    max_refund_amount = None
    amount = compute_max_refund_amount(order_item, quantity)
    if order_item is not None and amount > 0:
        max_refund_amount = Money(
            amount=amount,
            currency=currency,
            hide_currency=False,
            post_format=tax_format)

    return RefundControls(
        show_update_totals=show_update_totals,
        update_totals=show_update_totals,
        show_update_reward_points=show_update_reward_points,
        update_reward_points=update_reward_points,
        max_refund_amount=max_refund_amount)
