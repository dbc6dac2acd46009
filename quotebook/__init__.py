"""Flask application factory."""
import logging
import os

from flask import Flask
from flask.logging import default_handler
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_mail import Mail
from flask_wtf.csrf import CSRFProtect

from config import config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
mail = Mail()
csrf = CSRFProtect()


def _configure_logging(app):
    level = app.config.get('LOG_LEVEL', 'INFO')
    app.logger.setLevel(level)
    package_logger = logging.getLogger('quotebook')
    package_logger.setLevel(level)
    if default_handler not in package_logger.handlers:
        package_logger.addHandler(default_handler)


def create_app(config_name=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    mail.init_app(app)
    csrf.init_app(app)

    from quotebook.models import User

    @login_manager.user_loader
    def load_user(user_id):
        user = db.session.get(User, user_id)
        if user is None or not user.is_active:
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        from quotebook.blueprints.errors import error_response
        return error_response('Authentication required.', 'unauthorized', 401)

    # Register blueprints
    from quotebook.blueprints.auth import auth_bp
    from quotebook.blueprints.clients import clients_bp
    from quotebook.blueprints.quotes import quotes_bp
    from quotebook.blueprints.invoices import invoices_bp
    from quotebook.blueprints.payments import payments_bp
    from quotebook.blueprints.analytics import analytics_bp
    from quotebook.blueprints.settings import settings_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(clients_bp, url_prefix='/api/clients')
    app.register_blueprint(quotes_bp, url_prefix='/api/quotes')
    app.register_blueprint(invoices_bp, url_prefix='/api/invoices')
    app.register_blueprint(payments_bp, url_prefix='/api/payment-history')
    app.register_blueprint(analytics_bp, url_prefix='/api/analytics')
    app.register_blueprint(settings_bp, url_prefix='/api/settings')

    # Error handlers
    from quotebook.blueprints.errors import register_error_handlers
    register_error_handlers(app)

    from quotebook.cli import register_cli
    register_cli(app)

    # Ignore "already exists" so multiple workers or an existing DB don't crash the app.
    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            if "already exists" in str(e).lower() or "duplicate key" in str(e).lower():
                app.logger.debug('Tables already present: %s', e)
            else:
                raise

    return app
