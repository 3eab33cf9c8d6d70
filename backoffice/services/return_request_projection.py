"""
Turns ReturnRequest records into grid and edit-view rows.

``ListRow`` is what the paged grid ships: no free text, no staff notes,
no accept-form data. ``DetailRow`` extends it for the single-record edit
view. Related records are passed in already resolved; absence of an
order item, customer or store degrades to empty values and never raises.
"""
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional
import logging

from backoffice.services import (
    currency_service,
    datetime_helper,
    localization_service,
    message_store,
    setting_service,
    store_service,
)
from backoffice.services.currency_service import CurrencyInfo, Money
from backoffice.services.refund_policy import (
    RefundControls,
    compute_refund_controls,
)
from backoffice.utils import build_edit_url, split_safe

logger = logging.getLogger(__name__)

NOT_AVAILABLE = 'N/A'


@dataclass
class ProjectionContext:
    stores_by_id: Dict[int, object]
    localize_enum: Callable
    to_display_time: Callable
    build_edit_url: Callable
    translate: Callable = lambda key: key
    get_setting: Callable = lambda name, language_id, store_id: ''
    get_primary_currency: Callable = lambda: CurrencyInfo(code='USD')
    tax_format: Optional[str] = None
    take_message: Callable = lambda key: None


@dataclass
class SelectOption:
    text: str
    value: str
    selected: bool = False


@dataclass
class UpdateOrderItemForm:
    id: int
    caption: str
    post_url: Optional[str]
    controls: RefundControls


@dataclass
class ListRow:
    id: int
    product_id: int = 0
    product_sku: Optional[str] = None
    product_name: Optional[str] = None
    product_type_name: Optional[str] = None
    product_type_label_hint: Optional[str] = None
    attribute_info: Optional[str] = None
    order_id: int = 0
    order_number: Optional[str] = None
    customer_id: int = 0
    customer_full_name: str = NOT_AVAILABLE
    can_send_email_to_customer: bool = False
    quantity: int = 0
    return_request_status_string: Optional[str] = None
    created_on: Optional[datetime] = None
    updated_on: Optional[datetime] = None
    edit_url: Optional[str] = None
    customer_edit_url: Optional[str] = None
    order_edit_url: Optional[str] = None
    product_edit_url: Optional[str] = None
    store_name: Optional[str] = None


@dataclass
class DetailRow(ListRow):
    reason_for_return: Optional[str] = None
    requested_action: Optional[str] = None
    requested_action_updated: Optional[datetime] = None
    customer_comments: Optional[str] = None
    staff_notes: Optional[str] = None
    admin_comment: Optional[str] = None
    return_request_status_id: int = 0
    reason_options: List[SelectOption] = field(default_factory=list)
    action_options: List[SelectOption] = field(default_factory=list)
    update_order_item: Optional[UpdateOrderItemForm] = None
    return_request_info: Optional[str] = None


def _memoize(fn):
    cache = {}

    def wrapper(key):
        if key not in cache:
            cache[key] = fn(key)
        return cache[key]
    return wrapper


def create_projection_context(stores_by_id=None, consume_message=True):
    """Wire the projector to the application services for one request.

    With ``consume_message=False`` the one-shot info message is left in
    place for the next view that reads it.
    """
    language_id = localization_service.get_working_language_id()
    tz = datetime_helper.get_current_time_zone()
    if stores_by_id is None:
        stores_by_id = store_service.get_stores_by_id()

    return ProjectionContext(
        stores_by_id=stores_by_id,
        localize_enum=_memoize(
            lambda member: localization_service.get_localized_enum(
                member, language_id)),
        translate=_memoize(
            lambda key: localization_service.get_resource(key, language_id)),
        to_display_time=lambda dt: datetime_helper.convert_to_user_time(
            dt, tz),
        build_edit_url=build_edit_url,
        get_setting=setting_service.get_localized_setting,
        get_primary_currency=currency_service.get_primary_currency,
        tax_format=currency_service.get_tax_format(True, True),
        take_message=(
            message_store.take_once if consume_message
            else lambda key: None),
    )


def build_select_options(raw_value, current, unspecified_text):
    # Sentinel first, then tokens in source order; duplicates are kept.
    options = [SelectOption(text=unspecified_text, value='')]
    for token in split_safe(raw_value):
        options.append(
            SelectOption(text=token, value=token, selected=token == current))
    return options


def _product_type_name(product, ctx):
    try:
        return ctx.localize_enum(product.product_type)
    except ValueError:
        logger.warning(
            "Product %s has unknown type id %s",
            product.id,
            product.product_type_id)
        return None


def _base_fields(return_request, order_item, ctx):
    if order_item is None and return_request.order_item_id:
        logger.warning(
            "Order item %s referenced by return request %s not found",
            return_request.order_item_id,
            return_request.id)

    product = order_item.product if order_item else None
    order = order_item.order if order_item else None
    customer = return_request.customer

    values = {
        'id': return_request.id,
        'product_id': order_item.product_id if order_item else 0,
        'product_sku': product.sku if product else None,
        'product_name': product.name if product else None,
        'product_type_name': (
            _product_type_name(product, ctx) if product else None),
        'product_type_label_hint': (
            product.product_type_label_hint if product else None),
        'attribute_info': (
            order_item.attribute_description if order_item else None),
        'order_id': order_item.order_id if order_item else 0,
        'order_number': order.get_order_number() if order else None,
        'customer_id': return_request.customer_id,
        'customer_full_name': (
            (customer.full_name if customer else '') or NOT_AVAILABLE),
        'can_send_email_to_customer': bool(
            customer and customer.find_email()),
        'quantity': return_request.quantity,
        'return_request_status_string': ctx.localize_enum(
            return_request.return_request_status),
        'created_on': ctx.to_display_time(return_request.created_on_utc),
        'updated_on': ctx.to_display_time(return_request.updated_on_utc),
        'edit_url': ctx.build_edit_url('return_request', return_request.id),
        'customer_edit_url': ctx.build_edit_url(
            'customer', return_request.customer_id),
    }

    if order_item is not None:
        values['order_edit_url'] = ctx.build_edit_url(
            'order', order_item.order_id)
        values['product_edit_url'] = ctx.build_edit_url(
            'product', order_item.product_id)

    # Single store deployments hide the store column.
    if len(ctx.stores_by_id) > 1:
        store = ctx.stores_by_id.get(return_request.store_id)
        values['store_name'] = store.name if store else None

    return values


def project_list_row(return_request, order_item, ctx) -> ListRow:
    return ListRow(**_base_fields(return_request, order_item, ctx))


def project_detail_row(return_request, order_item, ctx) -> DetailRow:
    values = _base_fields(return_request, order_item, ctx)
    order = order_item.order if order_item else None
    store = ctx.stores_by_id.get(return_request.store_id)

    values.update({
        'reason_for_return': return_request.reason_for_return,
        'requested_action': return_request.requested_action,
        'requested_action_updated': (
            ctx.to_display_time(return_request.requested_action_updated_on_utc)
            if return_request.requested_action_updated_on_utc else None),
        'customer_comments': return_request.customer_comments,
        'staff_notes': return_request.staff_notes,
        'admin_comment': return_request.admin_comment,
        'return_request_status_id': return_request.return_request_status_id,
    })

    language_id = order.customer_language_id if order else None
    store_id = store.id if store else None
    unspecified = ctx.translate('Common.Unspecified')
    values['reason_options'] = build_select_options(
        ctx.get_setting(
            setting_service.RETURN_REQUEST_REASONS, language_id, store_id),
        return_request.reason_for_return,
        unspecified)
    values['action_options'] = build_select_options(
        ctx.get_setting(
            setting_service.RETURN_REQUEST_ACTIONS, language_id, store_id),
        return_request.requested_action,
        unspecified)

    values['update_order_item'] = UpdateOrderItemForm(
        id=return_request.id,
        caption=ctx.translate('Admin.ReturnRequests.Accept.Caption'),
        post_url=ctx.build_edit_url(
            'return_request_accept', return_request.id),
        controls=compute_refund_controls(
            order,
            order_item,
            return_request.quantity,
            ctx.get_primary_currency(),
            ctx.tax_format))

    values['return_request_info'] = ctx.take_message(
        message_store.UPDATE_ORDER_DETAILS_INFO_KEY)

    return DetailRow(**values)


def serialize_row(value):
    """JSON-ready form of rows and their nested values."""
    if isinstance(value, Money):
        return value.to_dict()
    if isinstance(value, datetime):
        return value.isoformat()
    if is_dataclass(value):
        return {
            f.name: serialize_row(getattr(value, f.name))
            for f in fields(value)
        }
    if isinstance(value, (list, tuple)):
        return [serialize_row(v) for v in value]
    return value
