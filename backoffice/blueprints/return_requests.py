from flask import Blueprint, current_app, jsonify, redirect, request, url_for
from flask_login import login_required, current_user
from backoffice.errors import DataUnavailable, InvalidArgument
from backoffice.extensions import db
from backoffice.middleware import role_required
from backoffice.models import ReturnRequestStatus
from backoffice.services import message_store, store_service
from backoffice.services.audit_service import log_audit
from backoffice.services.currency_service import Money, get_primary_currency
from backoffice.services.localization_service import (
    get_localized_enum,
    get_resource,
    get_working_language_id,
)
from backoffice.services.refund_policy import compute_max_refund_amount
from backoffice.services.return_request_projection import (
    create_projection_context,
    serialize_row,
)
from backoffice.services.return_request_service import (
    ReturnRequestQuery,
    SortSpec,
    get_return_request,
    get_return_request_detail,
    get_return_request_grid,
    load_order_items,
)
from backoffice.services.setting_service import (
    RETURN_REQUEST_ACTIONS,
    RETURN_REQUEST_REASONS,
    get_localized_setting,
)
from backoffice.utils import optional_int, optional_str, split_safe
from datetime import datetime
from decimal import Decimal, InvalidOperation
from sqlalchemy.exc import SQLAlchemyError
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('return_requests', __name__)

EDITABLE_TEXT_FIELDS = ('customer_comments', 'staff_notes', 'admin_comment')


def _request_data():
    if request.method in ('POST', 'PATCH', 'PUT'):
        data = request.get_json(silent=True)
        if data is not None:
            if not isinstance(data, dict):
                raise InvalidArgument('JSON body must be an object')
            return data
        return request.form
    return request.args


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Saving return request failed: %s", e, exc_info=True)
        raise DataUnavailable('Return request could not be saved')


def _parse_grid_query(data):
    page = optional_int(data, 'page')
    page_size = optional_int(data, 'page_size')
    if page_size is None:
        page_size = optional_int(data, 'per_page')
    if page_size is None:
        page_size = current_app.config['ITEMS_PER_PAGE']
    max_page_size = current_app.config['MAX_ITEMS_PER_PAGE']
    if page_size > max_page_size:
        page_size = max_page_size

    sort = None
    sort_field = (optional_str(data, 'sort') or '').strip()
    if sort_field:
        direction = (
            optional_str(data, 'sort_dir') or 'asc').strip().lower()
        sort = SortSpec(sort_field, direction)

    return ReturnRequestQuery(
        search_id=optional_int(data, 'search_id'),
        search_status_id=optional_int(data, 'search_status_id'),
        search_store_id=optional_int(data, 'search_store_id'),
        page=1 if page is None else page,
        page_size=page_size,
        sort=sort,
    )


def _allowed_values(setting_name, return_request, order_item):
    order = order_item.order if order_item else None
    raw = get_localized_setting(
        setting_name,
        order.customer_language_id if order else None,
        return_request.store_id or None)
    return split_safe(raw)


@bp.route('/admin/return-requests', methods=['GET'])
@login_required
@role_required('ADMIN')
def index():
    return redirect(url_for('return_requests.list_page'))


@bp.route('/admin/return-requests/list', methods=['GET'])
@login_required
@role_required('ADMIN')
def list_page():
    language_id = get_working_language_id()
    stores = store_service.get_all_stores()
    return jsonify({
        'stores': store_service.to_select_list(
            stores, get_resource('Admin.Common.StoresAll', language_id)),
        'statuses': [{
            'text': get_localized_enum(s, language_id),
            'value': str(int(s)),
        } for s in ReturnRequestStatus],
        'page_size': current_app.config['ITEMS_PER_PAGE'],
    })


@bp.route('/api/admin/return-requests', methods=['GET', 'POST'])
@login_required
@role_required('ADMIN')
def return_request_list():
    query = _parse_grid_query(_request_data())
    result = get_return_request_grid(query)
    return jsonify({
        'rows': [serialize_row(r) for r in result.items],
        'total': result.total_count,
        'page': result.page,
        'pages': result.pages,
    })


@bp.route('/api/admin/return-requests/<int:return_request_id>',
          methods=['GET'])
@login_required
@role_required('ADMIN')
def return_request_detail(return_request_id):
    row = get_return_request_detail(return_request_id)
    return jsonify(serialize_row(row))


@bp.route('/api/admin/return-requests/<int:return_request_id>',
          methods=['PATCH', 'PUT'])
@login_required
@role_required('ADMIN')
def update_return_request(return_request_id):
    return_request = get_return_request(return_request_id)
    order_item = load_order_items(
        [return_request.order_item_id]).get(return_request.order_item_id)
    data = _request_data()
    texts = {
        name: optional_str(data, name)
        for name in EDITABLE_TEXT_FIELDS if name in data
    }
    changes = {}

    if 'reason_for_return' in data:
        reason = (optional_str(data, 'reason_for_return') or '').strip()
        allowed = _allowed_values(
            RETURN_REQUEST_REASONS, return_request, order_item)
        if reason and reason not in allowed:
            raise InvalidArgument(f'Invalid reason for return: {reason}')
        if reason != (return_request.reason_for_return or ''):
            changes['reason_for_return'] = reason
        return_request.reason_for_return = reason

    if 'requested_action' in data:
        action = (optional_str(data, 'requested_action') or '').strip()
        allowed = _allowed_values(
            RETURN_REQUEST_ACTIONS, return_request, order_item)
        if action and action not in allowed:
            raise InvalidArgument(f'Invalid requested action: {action}')
        if action != (return_request.requested_action or ''):
            changes['requested_action'] = action
            return_request.requested_action_updated_on_utc = (
                datetime.utcnow())
        return_request.requested_action = action

    if 'return_request_status_id' in data:
        status_id = optional_int(data, 'return_request_status_id')
        try:
            status = ReturnRequestStatus(status_id)
        except ValueError:
            raise InvalidArgument(f'Invalid status: {status_id}')
        if status != return_request.return_request_status:
            changes['status'] = {
                'from': return_request.return_request_status.name,
                'to': status.name,
            }
        return_request.return_request_status = status

    for name, value in texts.items():
        if value != getattr(return_request, name):
            changes.setdefault('fields', []).append(name)
        setattr(return_request, name, value)

    return_request.updated_on_utc = datetime.utcnow()
    _commit()

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='RETURN_REQUEST_UPDATE',
        target_type='RETURN_REQUEST',
        target_id=return_request.id,
        payload=changes
    )

    # The accept message stays queued for the next detail view.
    row = get_return_request_detail(
        return_request.id,
        create_projection_context(consume_message=False))
    return jsonify(serialize_row(row))


@bp.route('/api/admin/return-requests/<int:return_request_id>/accept',
          methods=['POST'])
@login_required
@role_required('ADMIN')
def accept_return_request(return_request_id):
    return_request = get_return_request(return_request_id)
    order_item = load_order_items(
        [return_request.order_item_id]).get(return_request.order_item_id)
    if order_item is None:
        raise InvalidArgument(
            'The order item of this return request no longer exists')

    data = _request_data()
    max_amount = compute_max_refund_amount(order_item, return_request.quantity)
    raw_amount = data.get('refund_amount')
    if raw_amount is None or str(raw_amount).strip() == '':
        refund_amount = max_amount
    else:
        try:
            refund_amount = Decimal(str(raw_amount).strip())
        except InvalidOperation:
            raise InvalidArgument('refund_amount must be a number')
    if not refund_amount.is_finite() or refund_amount < 0:
        raise InvalidArgument('refund_amount must not be negative')
    if refund_amount > max_amount:
        raise InvalidArgument(
            f'refund_amount exceeds the maximum of {max_amount}')

    refund = Money(amount=refund_amount, currency=get_primary_currency())
    note = f'Accepted, refund {refund}'
    return_request.return_request_status = (
        ReturnRequestStatus.RETURN_AUTHORIZED)
    return_request.staff_notes = '\n'.join(
        x for x in (return_request.staff_notes, note) if x)
    return_request.updated_on_utc = datetime.utcnow()
    _commit()

    language_id = get_working_language_id()
    message_store.put(
        message_store.UPDATE_ORDER_DETAILS_INFO_KEY,
        f"{get_resource('Admin.ReturnRequests.Accepted', language_id)} "
        f"{refund}")

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='RETURN_REQUEST_ACCEPT',
        target_type='RETURN_REQUEST',
        target_id=return_request.id,
        payload={
            'refund_amount': str(refund.rounded_amount),
            'update_totals': bool(data.get('update_totals')),
            'update_reward_points': bool(data.get('update_reward_points')),
        }
    )

    return jsonify({
        'ok': True,
        'status': return_request.return_request_status.name,
        'refund_amount': refund.to_dict(),
    })


@bp.route('/api/admin/return-requests/<int:return_request_id>',
          methods=['DELETE'])
@login_required
@role_required('ADMIN')
def delete_return_request(return_request_id):
    return_request = get_return_request(return_request_id)
    payload = {
        'order_item_id': return_request.order_item_id,
        'customer_id': return_request.customer_id,
        'status': return_request.return_request_status.name,
    }
    db.session.delete(return_request)
    _commit()

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='RETURN_REQUEST_DELETE',
        target_type='RETURN_REQUEST',
        target_id=return_request_id,
        payload=payload
    )

    return jsonify({'ok': True})
