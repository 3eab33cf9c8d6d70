from flask import Flask
from flask_migrate import Migrate
from flask_login import LoginManager
from backoffice.extensions import db
from backoffice.config import Config
from backoffice.errors import register_error_handlers
from backoffice.middleware import setup_auth_middleware
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('app.log', delay=True),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)

migrate = Migrate()
login_manager = LoginManager()
login_manager.login_view = 'auth.login'
login_manager.login_message = 'Please log in to access this page.'


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Setup user loader
    from backoffice.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Register blueprints
    from backoffice.blueprints import auth, return_requests

    app.register_blueprint(auth.bp, url_prefix='/')
    app.register_blueprint(return_requests.bp, url_prefix='/')

    register_error_handlers(app)

    # Setup authentication middleware (site-wide login protection)
    setup_auth_middleware(app)

    # Note: Database tables are managed via Flask-Migrate
    # Use 'flask db upgrade' to create/update tables

    logger.info("Back office application initialized")
    return app
