from backoffice.extensions import db
from backoffice.models import AuditLog, ReturnRequest, ReturnRequestStatus

API = '/api/admin/return-requests'


def test_grid_requires_login(app):
    response = app.test_client().get(API)
    assert response.status_code == 401
    assert response.get_json()['login_required'] is True


def test_grid_requires_admin_role(staff_client):
    response = staff_client.get(API)
    assert response.status_code == 403


def test_index_redirects_to_list(admin_client):
    response = admin_client.get('/admin/return-requests')
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/admin/return-requests/list')


def test_list_page_filter_options(admin_client, store, second_store):
    data = admin_client.get('/admin/return-requests/list').get_json()
    assert data['stores'][0] == {'text': 'All stores', 'value': '0'}
    assert len(data['stores']) == 3
    assert data['statuses'][0] == {'text': 'Pending', 'value': '0'}
    assert data['page_size'] == 20


def test_grid_rows_and_total(
        admin_client, make_order_item, make_return_request, currency):
    item = make_order_item()
    for _ in range(3):
        make_return_request(order_item_id=item.id, staff_notes='internal')

    response = admin_client.get(f'{API}?page=1&page_size=2')
    data = response.get_json()

    assert response.status_code == 200
    assert data['total'] == 3
    assert data['pages'] == 2
    assert len(data['rows']) == 2
    row = data['rows'][0]
    assert row['product_name'] == 'Wireless Headphones'
    assert row['return_request_status_string'] == 'Pending'
    assert row['store_name'] is None
    assert 'staff_notes' not in row
    assert 'update_order_item' not in row


def test_grid_accepts_json_body(admin_client, make_return_request):
    target = make_return_request(status=ReturnRequestStatus.RECEIVED)
    make_return_request()

    response = admin_client.post(API, json={
        'search_status_id': int(ReturnRequestStatus.RECEIVED),
        'page': 1,
        'page_size': 10,
    })

    data = response.get_json()
    assert data['total'] == 1
    assert [r['id'] for r in data['rows']] == [target.id]


def test_grid_search_by_missing_id(admin_client, make_return_request):
    make_return_request()
    data = admin_client.get(f'{API}?search_id=42').get_json()
    assert data == {'rows': [], 'total': 0, 'page': 1, 'pages': 0}


def test_grid_invalid_paging_is_rejected(admin_client):
    response = admin_client.get(f'{API}?page_size=0')
    assert response.status_code == 400
    assert 'page_size' in response.get_json()['error']

    response = admin_client.get(f'{API}?page=abc')
    assert response.status_code == 400


def test_grid_invalid_sort_is_rejected(admin_client):
    response = admin_client.get(f'{API}?sort=password')
    assert response.status_code == 400


def test_grid_page_size_is_capped(admin_client, make_return_request):
    make_return_request()
    response = admin_client.get(f'{API}?page_size=5000')
    assert response.status_code == 200
    assert response.get_json()['pages'] == 1


def test_detail_not_found(admin_client):
    response = admin_client.get(f'{API}/999')
    assert response.status_code == 404
    assert response.get_json() == {'error': 'Return request 999 not found'}


def test_detail_row(
        admin_client, make_order_item, make_return_request, currency):
    item = make_order_item()
    rr = make_return_request(
        order_item_id=item.id, quantity=2, reason_for_return='Damaged')

    data = admin_client.get(f'{API}/{rr.id}').get_json()

    assert data['reason_for_return'] == 'Damaged'
    assert data['reason_options'][0]['value'] == ''
    assert data['reason_options'][0]['text'] == 'Unspecified'
    form = data['update_order_item']
    assert form['post_url'] == f'{API}/{rr.id}/accept'
    assert form['controls']['show_update_totals'] is True
    assert form['controls']['max_refund_amount']['amount'] == '39.98'
    assert data['return_request_info'] is None


def test_update_return_request(admin_client, make_return_request):
    rr = make_return_request(requested_action='Refund')

    response = admin_client.patch(f'{API}/{rr.id}', json={
        'reason_for_return': 'Damaged',
        'requested_action': 'Replacement',
        'return_request_status_id': int(ReturnRequestStatus.RECEIVED),
        'staff_notes': 'Parcel arrived',
    })

    assert response.status_code == 200
    data = response.get_json()
    assert data['reason_for_return'] == 'Damaged'
    assert data['requested_action'] == 'Replacement'
    assert data['requested_action_updated'] is not None
    assert data['return_request_status_id'] == int(
        ReturnRequestStatus.RECEIVED)
    assert data['staff_notes'] == 'Parcel arrived'

    audit = AuditLog.query.filter_by(action='RETURN_REQUEST_UPDATE').one()
    assert audit.target_id == rr.id
    assert audit.get_payload()['status'] == {
        'from': 'PENDING', 'to': 'RECEIVED'}


def test_update_keeps_action_timestamp_when_unchanged(
        admin_client, make_return_request):
    rr = make_return_request(requested_action='Refund')
    response = admin_client.patch(f'{API}/{rr.id}', json={
        'requested_action': 'Refund',
    })
    assert response.get_json()['requested_action_updated'] is None


def test_update_rejects_unknown_reason(admin_client, make_return_request):
    rr = make_return_request()
    response = admin_client.patch(f'{API}/{rr.id}', json={
        'reason_for_return': 'Changed my mind',
    })
    assert response.status_code == 400
    assert db.session.get(ReturnRequest, rr.id).reason_for_return is None


def test_update_rejects_unknown_status(admin_client, make_return_request):
    rr = make_return_request()
    response = admin_client.patch(f'{API}/{rr.id}', json={
        'return_request_status_id': 7,
    })
    assert response.status_code == 400


def test_accept_sets_status_and_one_shot_message(
        admin_client, make_order_item, make_return_request, currency):
    item = make_order_item(unit_price='19.99')
    rr = make_return_request(order_item_id=item.id, quantity=2)

    response = admin_client.post(
        f'{API}/{rr.id}/accept', json={'refund_amount': '20.00'})

    assert response.status_code == 200
    data = response.get_json()
    assert data['status'] == 'RETURN_AUTHORIZED'
    assert data['refund_amount']['formatted'] == '$20.00'

    first = admin_client.get(f'{API}/{rr.id}').get_json()
    assert first['return_request_info'] == (
        'The return request has been accepted. $20.00')
    assert first['return_request_status_id'] == int(
        ReturnRequestStatus.RETURN_AUTHORIZED)
    assert 'Accepted, refund $20.00' in first['staff_notes']

    second = admin_client.get(f'{API}/{rr.id}').get_json()
    assert second['return_request_info'] is None


def test_accept_defaults_to_max_refund(
        admin_client, make_order_item, make_return_request, currency):
    item = make_order_item(unit_price='19.99')
    rr = make_return_request(order_item_id=item.id, quantity=2)

    response = admin_client.post(f'{API}/{rr.id}/accept', json={})

    assert response.get_json()['refund_amount']['amount'] == '39.98'


def test_accept_rejects_refund_above_maximum(
        admin_client, make_order_item, make_return_request):
    item = make_order_item(unit_price='19.99')
    rr = make_return_request(order_item_id=item.id, quantity=2)

    response = admin_client.post(
        f'{API}/{rr.id}/accept', json={'refund_amount': '40.00'})

    assert response.status_code == 400
    assert db.session.get(ReturnRequest, rr.id).return_request_status == (
        ReturnRequestStatus.PENDING)


def test_accept_rejects_invalid_amount(
        admin_client, make_order_item, make_return_request):
    item = make_order_item()
    rr = make_return_request(order_item_id=item.id)
    for amount in ('abc', '-1', 'NaN'):
        response = admin_client.post(
            f'{API}/{rr.id}/accept', json={'refund_amount': amount})
        assert response.status_code == 400


def test_accept_without_order_item(admin_client, make_return_request):
    rr = make_return_request(order_item_id=31337)
    response = admin_client.post(f'{API}/{rr.id}/accept', json={})
    assert response.status_code == 400


def test_delete_return_request(admin_client, make_return_request):
    rr = make_return_request()
    rr_id = rr.id

    response = admin_client.delete(f'{API}/{rr_id}')

    assert response.status_code == 200
    assert admin_client.get(f'{API}/{rr_id}').status_code == 404
    assert AuditLog.query.filter_by(
        action='RETURN_REQUEST_DELETE', target_id=rr_id).count() == 1


def test_login_rejects_bad_password(app, admin_user):
    response = app.test_client().post('/api/auth/login', json={
        'email': admin_user.email,
        'password': 'wrong',
    })
    assert response.status_code == 401


def test_admin_page_redirects_to_login(app):
    response = app.test_client().get('/admin/return-requests/list')
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/login')


def test_grid_rejects_non_string_sort(admin_client):
    response = admin_client.post(API, json={'sort': 5})
    assert response.status_code == 400
    assert response.get_json() == {'error': 'sort must be a string'}

    response = admin_client.post(API, json={'sort': 'id', 'sort_dir': []})
    assert response.status_code == 400


def test_grid_rejects_fractional_page(admin_client, make_return_request):
    make_return_request()
    response = admin_client.post(API, json={'page': 1.9})
    assert response.status_code == 400

    response = admin_client.post(API, json={'page': 1.0, 'page_size': 10})
    assert response.status_code == 200
    assert response.get_json()['total'] == 1


def test_update_rejects_non_string_reason(admin_client, make_return_request):
    rr = make_return_request()
    response = admin_client.patch(f'{API}/{rr.id}', json={
        'reason_for_return': 7,
    })
    assert response.status_code == 400
    assert response.get_json() == {
        'error': 'reason_for_return must be a string'}


def test_update_rejects_non_string_notes(admin_client, make_return_request):
    rr = make_return_request(staff_notes='original')
    response = admin_client.patch(f'{API}/{rr.id}', json={
        'admin_comment': 'changed',
        'staff_notes': ['a'],
    })
    assert response.status_code == 400
    stored = db.session.get(ReturnRequest, rr.id)
    assert stored.staff_notes == 'original'
    assert stored.admin_comment is None


def test_update_audits_only_changed_fields(admin_client, make_return_request):
    rr = make_return_request(staff_notes='same', customer_comments='old')
    response = admin_client.patch(f'{API}/{rr.id}', json={
        'staff_notes': 'same',
        'customer_comments': 'new',
        'admin_comment': None,
    })
    assert response.status_code == 200
    audit = AuditLog.query.filter_by(action='RETURN_REQUEST_UPDATE').one()
    assert audit.get_payload() == {'fields': ['customer_comments']}


def test_update_leaves_accept_message_for_detail_view(
        admin_client, make_order_item, make_return_request, currency):
    item = make_order_item(unit_price='19.99')
    rr = make_return_request(order_item_id=item.id, quantity=2)
    admin_client.post(f'{API}/{rr.id}/accept', json={})

    edited = admin_client.patch(f'{API}/{rr.id}', json={
        'admin_comment': 'Refund sent',
    }).get_json()
    assert edited['return_request_info'] is None

    detail = admin_client.get(f'{API}/{rr.id}').get_json()
    assert detail['return_request_info'] == (
        'The return request has been accepted. $39.98')
