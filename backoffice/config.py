import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or (
        'dev-secret-key-change-in-production'
    )
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or (
        'sqlite:///backoffice.db'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Timezone used for grid timestamps when the admin has none set.
    DISPLAY_TIMEZONE = os.environ.get('DISPLAY_TIMEZONE', 'UTC')

    # Used only when no currency row is flagged as primary.
    PRIMARY_CURRENCY_CODE = os.environ.get('PRIMARY_CURRENCY_CODE', 'USD')

    # Pagination configuration
    ITEMS_PER_PAGE = int(os.environ.get('ITEMS_PER_PAGE', 20))
    MAX_ITEMS_PER_PAGE = int(os.environ.get('MAX_ITEMS_PER_PAGE', 100))

    # Fallbacks for the ReturnRequestReasons / ReturnRequestActions
    # settings (comma separated).
    RETURN_REQUEST_REASONS = os.environ.get('RETURN_REQUEST_REASONS') or (
        'Received Wrong Product,Wrong Product Ordered,'
        'There Was A Problem With The Product'
    )
    RETURN_REQUEST_ACTIONS = os.environ.get('RETURN_REQUEST_ACTIONS') or (
        'Repair,Replacement,Store Credit'
    )

    # Edit pages of entities owned by other back office modules.
    ADMIN_EDIT_URL_TEMPLATES = {
        'customer': '/admin/customers/edit/{id}',
        'order': '/admin/orders/edit/{id}',
        'product': '/admin/products/edit/{id}',
    }


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    DISPLAY_TIMEZONE = 'UTC'
    RETURN_REQUEST_REASONS = 'Wrong size,Damaged'
    RETURN_REQUEST_ACTIONS = 'Refund,Replacement'
