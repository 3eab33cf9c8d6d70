"""
Shared pytest fixtures: app with an in-memory database and model factories.
"""
import itertools
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from backoffice import create_app
from backoffice.config import TestConfig
from backoffice.extensions import db
from backoffice.models import (
    Address,
    Currency,
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ProductType,
    ReturnRequest,
    ReturnRequestStatus,
    Store,
    User,
    UserRole,
)
from backoffice.services.currency_service import CurrencyInfo, TAX_INCL_FORMAT
from backoffice.services.return_request_projection import ProjectionContext

BASE_TIME = datetime(2024, 3, 1, 12, 0, 0)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def store(app):
    store = Store(name='Main Store', display_order=1)
    db.session.add(store)
    db.session.commit()
    return store


@pytest.fixture
def second_store(app, store):
    store = Store(name='Outlet Store', display_order=2)
    db.session.add(store)
    db.session.commit()
    return store


@pytest.fixture
def currency(app):
    currency = Currency(
        code='USD',
        name='US Dollar',
        symbol='$',
        rounding_decimals=2,
        is_primary=True)
    db.session.add(currency)
    db.session.commit()
    return currency


@pytest.fixture
def customer(app):
    customer = Customer(
        first_name='Alice',
        last_name='Walker',
        email='alice@example.com')
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture
def customer_without_email(app):
    customer = Customer(
        billing_address=Address(first_name='Bob', last_name='Stone'))
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture
def make_order_item(app, customer, store):
    def _make(
            unit_price='19.99',
            order_status=OrderStatus.PENDING,
            reward_points_were_added=False,
            customer_language_id=None,
            product_name='Wireless Headphones'):
        product = Product(
            name=product_name,
            sku='WH-100',
            product_type_id=int(ProductType.SIMPLE))
        order = Order(
            order_number=None,
            customer_id=customer.id,
            store_id=store.id,
            order_status_id=int(order_status),
            customer_language_id=customer_language_id,
            reward_points_were_added=reward_points_were_added)
        db.session.add_all([product, order])
        db.session.flush()

        item = OrderItem(
            order_id=order.id,
            product_id=product.id,
            unit_price_incl_tax=Decimal(unit_price),
            quantity=2,
            attribute_description='Color: Black')
        db.session.add(item)
        db.session.commit()
        return item
    return _make


@pytest.fixture
def make_return_request(app, customer, store):
    counter = itertools.count()

    def _make(
            order_item_id=999,
            quantity=1,
            status=ReturnRequestStatus.PENDING,
            store_id=None,
            customer_id=None,
            **kwargs):
        created = BASE_TIME + timedelta(minutes=next(counter))
        return_request = ReturnRequest(
            order_item_id=order_item_id,
            customer_id=customer_id or customer.id,
            store_id=store_id or store.id,
            quantity=quantity,
            return_request_status_id=int(status),
            created_on_utc=created,
            updated_on_utc=created,
            **kwargs)
        db.session.add(return_request)
        db.session.commit()
        return return_request
    return _make


@pytest.fixture
def make_context():
    """Projection context with deterministic collaborators."""
    def _make(stores, settings=None, message=None):
        settings = settings or {}
        return ProjectionContext(
            stores_by_id={s.id: s for s in stores},
            localize_enum=lambda member: member.name.replace('_', ' ').title(),
            to_display_time=lambda dt: dt,
            build_edit_url=lambda entity, entity_id: f'/{entity}/{entity_id}',
            translate=lambda key: (
                'Unspecified' if key == 'Common.Unspecified' else key),
            get_setting=lambda name, language_id, store_id: settings.get(
                name, ''),
            get_primary_currency=lambda: CurrencyInfo(code='USD', symbol='$'),
            tax_format=TAX_INCL_FORMAT,
            take_message=lambda key: message)
    return _make


def _create_user(email, role):
    user = User(email=email, role=role)
    user.set_password('secret123')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin_user(app):
    return _create_user('admin@example.com', UserRole.ADMIN)


@pytest.fixture
def admin_client(app, admin_user):
    client = app.test_client()
    response = client.post('/api/auth/login', json={
        'email': admin_user.email,
        'password': 'secret123',
    })
    assert response.status_code == 200
    return client


@pytest.fixture
def staff_client(app):
    user = _create_user('staff@example.com', UserRole.STAFF)
    client = app.test_client()
    response = client.post('/api/auth/login', json={
        'email': user.email,
        'password': 'secret123',
    })
    assert response.status_code == 200
    return client
