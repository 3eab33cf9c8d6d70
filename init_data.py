from datetime import datetime, timedelta
from decimal import Decimal

from backoffice import create_app
from backoffice.extensions import db
from backoffice.models import (
    Address,
    Currency,
    Customer,
    Language,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ProductType,
    ReturnRequest,
    ReturnRequestStatus,
    Setting,
    Store,
    User,
    UserRole,
)
from backoffice.services.setting_service import (
    RETURN_REQUEST_ACTIONS,
    RETURN_REQUEST_REASONS,
)

app = create_app()

with app.app_context():
    db.create_all()

    language = Language.query.filter_by(culture="en-US").first()
    if not language:
        language = Language(name="English", culture="en-US", is_default=True)
        db.session.add(language)
        db.session.flush()
        print("Created language: en-US")

    stores = Store.query.all()
    if not stores:
        stores = [
            Store(name="Main Store", display_order=1),
            Store(name="Outlet Store", display_order=2),
        ]
        db.session.add_all(stores)
        db.session.flush()
        print("Created stores: Main Store, Outlet Store")

    if not Currency.query.filter_by(is_primary=True).first():
        db.session.add(
            Currency(
                code="USD",
                name="US Dollar",
                symbol="$",
                rounding_decimals=2,
                is_primary=True))
        print("Created primary currency: USD")

    settings_data = [
        (RETURN_REQUEST_REASONS,
         "Received Wrong Product,Wrong Product Ordered,"
         "There Was A Problem With The Product"),
        (RETURN_REQUEST_ACTIONS, "Repair,Replacement,Store Credit"),
    ]
    for name, value in settings_data:
        if not Setting.query.filter_by(
                name=name, store_id=0, language_id=0).first():
            db.session.add(
                Setting(name=name, value=value, store_id=0, language_id=0))

    # Create admin account (if not exists)
    admin_email = "admin@example.com"
    admin = User.query.filter_by(email=admin_email).first()
    if not admin:
        admin = User(
            email=admin_email,
            role=UserRole.ADMIN,
            language_id=language.id)
        admin.set_password("admin123")
        db.session.add(admin)
        print(f"Created admin account: {admin_email} / admin123")

    if not ReturnRequest.query.first():
        products = [
            Product(
                name="Wireless Bluetooth Headphones",
                sku="WBH-100",
                product_type_id=int(ProductType.SIMPLE)),
            Product(
                name="Camera Starter Kit",
                sku="CAM-KIT",
                product_type_id=int(ProductType.BUNDLED)),
        ]
        db.session.add_all(products)

        customers_data = [
            ("Alice", "Walker", "alice@example.com"),
            ("Bob", "Stone", None),
        ]
        customers = []
        for first_name, last_name, email in customers_data:
            billing = Address(
                first_name=first_name,
                last_name=last_name,
                email=email,
                city="Springfield",
                address1="1 Main Street")
            customer = Customer(
                first_name=first_name,
                last_name=last_name,
                email=email,
                billing_address=billing)
            db.session.add(customer)
            customers.append(customer)
        db.session.flush()

        now = datetime.utcnow()
        statuses = [
            (OrderStatus.PENDING, False),
            (OrderStatus.COMPLETE, True),
        ]
        for index, (order_status, points_added) in enumerate(statuses):
            customer = customers[index]
            store = stores[index % len(stores)]
            order = Order(
                order_number=f"SO-{1000 + index}",
                customer_id=customer.id,
                store_id=store.id,
                order_status_id=int(order_status),
                customer_language_id=language.id,
                reward_points_were_added=points_added)
            db.session.add(order)
            db.session.flush()

            item = OrderItem(
                order_id=order.id,
                product_id=products[index].id,
                unit_price_incl_tax=Decimal("19.99") * (index + 1),
                quantity=2)
            db.session.add(item)
            db.session.flush()

            db.session.add(ReturnRequest(
                order_item_id=item.id,
                customer_id=customer.id,
                store_id=store.id,
                quantity=1 + index,
                return_request_status_id=int(ReturnRequestStatus.PENDING),
                reason_for_return="Received Wrong Product",
                requested_action="Replacement",
                customer_comments="Please send the right one.",
                created_on_utc=now - timedelta(days=index),
                updated_on_utc=now - timedelta(days=index)))
            print(f"Created return request for order {order.order_number}")

    db.session.commit()
    print("Seed data ready")
