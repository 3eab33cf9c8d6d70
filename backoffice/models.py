from backoffice.extensions import db
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime
from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlalchemy.orm import validates
import enum
import json


class UserRole(enum.Enum):
    ADMIN = 'ADMIN'
    STAFF = 'STAFF'


class ReturnRequestStatus(enum.IntEnum):
    PENDING = 0
    RECEIVED = 10
    RETURN_AUTHORIZED = 20
    ITEMS_REPAIRED = 30
    ITEMS_REFUNDED = 40
    REQUEST_REJECTED = 50
    CANCELLED = 60


class OrderStatus(enum.IntEnum):
    # Ordered: comparisons against PENDING decide which refund
    # controls the accept form offers.
    PENDING = 10
    PROCESSING = 20
    COMPLETE = 30
    CANCELLED = 40


class ProductType(enum.IntEnum):
    SIMPLE = 5
    GROUPED = 10
    BUNDLED = 15


PRODUCT_TYPE_LABEL_HINTS = {
    ProductType.SIMPLE: 'secondary d-none',
    ProductType.GROUPED: 'success',
    ProductType.BUNDLED: 'info',
}


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(UserRole),
        nullable=False,
        default=UserRole.STAFF)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    # IANA name, e.g. "Europe/Berlin". Falls back to DISPLAY_TIMEZONE.
    time_zone_id = db.Column(db.String(64), nullable=True)
    language_id = db.Column(
        db.Integer,
        db.ForeignKey('languages.id'),
        nullable=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)
    last_login_at = db.Column(db.DateTime, nullable=True)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.email}>'


class Store(db.Model):
    __tablename__ = 'stores'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    display_order = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self):
        return f'<Store {self.name}>'


class Language(db.Model):
    __tablename__ = 'languages'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    culture = db.Column(db.String(20), nullable=False, unique=True)
    is_default = db.Column(db.Boolean, default=False, nullable=False)

    def __repr__(self):
        return f'<Language {self.culture}>'


class LocaleStringResource(db.Model):
    __tablename__ = 'locale_string_resources'

    id = db.Column(db.Integer, primary_key=True)
    language_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'languages.id',
            ondelete='CASCADE'),
        nullable=False,
        index=True)
    resource_name = db.Column(db.String(200), nullable=False)
    resource_value = db.Column(db.Text, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            'language_id',
            'resource_name',
            name='uq_language_resource_name'),
    )

    def __repr__(self):
        return f'<LocaleStringResource {self.resource_name}>'


class Setting(db.Model):
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    value = db.Column(db.Text, nullable=True)
    # 0 means "all stores" / "language neutral".
    store_id = db.Column(db.Integer, nullable=False, default=0)
    language_id = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            'name',
            'store_id',
            'language_id',
            name='uq_setting_scope'),
    )

    def __repr__(self):
        return (
            f"<Setting {self.name} store={self.store_id} "
            f"language={self.language_id}>"
        )


class Currency(db.Model):
    __tablename__ = 'currencies'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(5), unique=True, nullable=False)
    name = db.Column(db.String(50), nullable=False)
    symbol = db.Column(db.String(10), nullable=True)
    rounding_decimals = db.Column(db.Integer, nullable=False, default=2)
    is_primary = db.Column(db.Boolean, default=False, nullable=False)

    def __repr__(self):
        return f'<Currency {self.code}>'


class Address(db.Model):
    __tablename__ = 'addresses'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    email = db.Column(db.String(120), nullable=True)
    company = db.Column(db.String(200), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    address1 = db.Column(db.String(200), nullable=True)

    def __repr__(self):
        return f'<Address {self.id}>'


class Customer(db.Model):
    __tablename__ = 'customers'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), nullable=True, index=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    billing_address_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'addresses.id',
            ondelete='SET NULL'),
        nullable=True)
    shipping_address_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'addresses.id',
            ondelete='SET NULL'),
        nullable=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)

    billing_address = db.relationship(
        'Address',
        foreign_keys=[billing_address_id])
    shipping_address = db.relationship(
        'Address',
        foreign_keys=[shipping_address_id])

    @property
    def full_name(self):
        parts = [
            (self.first_name or '').strip(),
            (self.last_name or '').strip()]
        name = ' '.join(p for p in parts if p)
        if name:
            return name
        address = self.billing_address or self.shipping_address
        if address:
            parts = [
                (address.first_name or '').strip(),
                (address.last_name or '').strip()]
            return ' '.join(p for p in parts if p)
        return ''

    def find_email(self):
        candidates = [
            self.email,
            self.billing_address.email if self.billing_address else None,
            self.shipping_address.email if self.shipping_address else None,
        ]
        for email in candidates:
            if email and email.strip():
                return email.strip()
        return None

    def __repr__(self):
        return f'<Customer {self.id}>'


class Product(db.Model):
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(400), nullable=False, index=True)
    sku = db.Column(db.String(100), nullable=True, index=True)
    product_type_id = db.Column(
        db.Integer,
        nullable=False,
        default=int(ProductType.SIMPLE))

    @property
    def product_type(self):
        return ProductType(self.product_type_id)

    @property
    def product_type_label_hint(self):
        try:
            product_type = self.product_type
        except ValueError:
            return 'secondary'
        return PRODUCT_TYPE_LABEL_HINTS.get(product_type, 'secondary')

    def __repr__(self):
        return f'<Product {self.name}>'


class Order(db.Model):
    __tablename__ = 'orders'

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(50), nullable=True)
    customer_id = db.Column(db.Integer, nullable=False, index=True)
    store_id = db.Column(db.Integer, nullable=False, default=0)
    order_status_id = db.Column(
        db.Integer,
        nullable=False,
        default=int(OrderStatus.PENDING))
    customer_language_id = db.Column(db.Integer, nullable=True)
    reward_points_were_added = db.Column(
        db.Boolean, default=False, nullable=False)
    created_on_utc = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False)

    items = db.relationship(
        'OrderItem',
        back_populates='order',
        lazy='dynamic',
        cascade='all, delete-orphan')

    @property
    def order_status(self):
        return OrderStatus(self.order_status_id)

    def get_order_number(self):
        if self.order_number and self.order_number.strip():
            return self.order_number
        return str(self.id)

    def __repr__(self):
        return f'<Order {self.id} status={self.order_status_id}>'


class OrderItem(db.Model):
    __tablename__ = 'order_items'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'orders.id',
            ondelete='CASCADE'),
        nullable=False,
        index=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey('products.id'),
        nullable=False,
        index=True)
    # Order snapshot price.
    unit_price_incl_tax = db.Column(db.Numeric(18, 4), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    attribute_description = db.Column(db.Text, nullable=True)

    order = db.relationship('Order', back_populates='items')
    product = db.relationship('Product')

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_order_quantity_positive'),
    )

    def __repr__(self):
        return (
            f"<OrderItem {self.id} order={self.order_id} "
            f"product={self.product_id}>"
        )


class ReturnRequest(db.Model):
    __tablename__ = 'return_requests'

    id = db.Column(db.Integer, primary_key=True)
    # Weak references: resolved by lookup, never cascaded.
    order_item_id = db.Column(db.Integer, nullable=False, index=True)
    customer_id = db.Column(db.Integer, nullable=False, index=True)
    store_id = db.Column(db.Integer, nullable=False, default=0, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    return_request_status_id = db.Column(
        db.Integer,
        nullable=False,
        default=int(ReturnRequestStatus.PENDING),
        index=True)
    reason_for_return = db.Column(db.String(400), nullable=True)
    requested_action = db.Column(db.String(400), nullable=True)
    requested_action_updated_on_utc = db.Column(db.DateTime, nullable=True)
    customer_comments = db.Column(db.Text, nullable=True)
    staff_notes = db.Column(db.Text, nullable=True)
    admin_comment = db.Column(db.Text, nullable=True)
    created_on_utc = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True)
    updated_on_utc = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False)

    customer = db.relationship(
        'Customer',
        primaryjoin='foreign(ReturnRequest.customer_id) == Customer.id',
        viewonly=True)

    __table_args__ = (
        CheckConstraint(
            'quantity > 0',
            name='check_return_quantity_positive'),
    )

    @validates('return_request_status_id')
    def validate_status_id(self, key, value):
        # Raises ValueError for ids outside the enumeration.
        return int(ReturnRequestStatus(int(value)))

    @validates('quantity')
    def validate_quantity(self, key, value):
        if value is None or int(value) <= 0:
            raise ValueError('quantity must be positive')
        return int(value)

    @property
    def return_request_status(self):
        return ReturnRequestStatus(self.return_request_status_id)

    @return_request_status.setter
    def return_request_status(self, status):
        self.return_request_status_id = int(status)

    def __repr__(self):
        return (
            f"<ReturnRequest {self.id} "
            f"status={self.return_request_status_id}>"
        )


class AuditLog(db.Model):
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    actor_id = db.Column(
        db.Integer,
        db.ForeignKey(
            'users.id',
            ondelete='SET NULL'),
        nullable=True)
    actor_role = db.Column(db.String(20), nullable=False)
    # e.g., RETURN_REQUEST_UPDATE, LOGIN_SUCCESS
    action = db.Column(db.String(100), nullable=False)
    # RETURN_REQUEST, USER, etc.
    target_type = db.Column(db.String(50), nullable=True)
    target_id = db.Column(db.Integer, nullable=True)
    ip = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(500), nullable=True)
    # JSON format key field snapshot
    payload_json = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True)

    actor = db.relationship('User', foreign_keys=[actor_id])

    def set_payload(self, data):
        self.payload_json = json.dumps(data, ensure_ascii=False, default=str)

    def get_payload(self):
        if self.payload_json:
            return json.loads(self.payload_json)
        return {}

    def __repr__(self):
        return f'<AuditLog {self.id} action={self.action}>'
