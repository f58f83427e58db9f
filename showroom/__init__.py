"""
Bridal Showroom service
Flask application factory
"""
import os
import logging
from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .extensions import showroom_services
from .config import get_config, validate_config
from .utils.errors import ErrorCode, error_response, internal_error, method_not_allowed, not_found
from .utils.exceptions import ShowroomError
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    config_name: str = None,
    shopify_client=None,
    klaviyo_service=None,
    product_catalog=None
) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)
        shopify_client: Replacement Shopify client (tests)
        klaviyo_service: Replacement Klaviyo service (tests)
        product_catalog: Source of showroom product ids for purchase detection

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    # Setup logging before anything else
    setup_logging()
    validate_config(config_name)

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    showroom_services.init_app(
        app,
        shopify_client=shopify_client,
        klaviyo_service=klaviyo_service,
        product_catalog=product_catalog,
    )

    CORS(
        app,
        origins=app.config.get('CORS_ALLOWED_ORIGIN', '*'),
        methods=['GET', 'POST', 'OPTIONS'],
        allow_headers=['Content-Type', 'X-Shopify-Hmac-SHA256', 'X-Shopify-Topic'],
        send_wildcard=True,
    )

    register_blueprints(app)
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'showroom'}

    logger.info('Showroom app created (%s)', config_name)
    return app


def register_blueprints(app: Flask) -> None:
    """Register all API and webhook blueprints."""
    from .api import bridal_party_bp, showrooms_bp, customers_bp
    from .webhooks import lifecycle_bp

    app.register_blueprint(bridal_party_bp, url_prefix='/api/bridal-party')
    app.register_blueprint(showrooms_bp, url_prefix='/api/showrooms')
    app.register_blueprint(customers_bp, url_prefix='/api/customers')

    app.register_blueprint(lifecycle_bp, url_prefix='/webhook')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""

    @app.errorhandler(ShowroomError)
    def showroom_error(error):
        return error_response(error.message, error.code, error.status_code)

    @app.errorhandler(400)
    def bad_request(error):
        return error_response(error.description, ErrorCode.INVALID_REQUEST, 400, log_error=False)

    @app.errorhandler(404)
    def resource_not_found(error):
        return not_found('Not found')

    @app.errorhandler(405)
    def wrong_method(error):
        return method_not_allowed()

    @app.errorhandler(HTTPException)
    def http_error(error):
        return error_response(error.description, ErrorCode.INVALID_REQUEST, error.code, log_error=False)

    @app.errorhandler(Exception)
    def unhandled_error(error):
        logger.exception(f'Unhandled error: {error}')
        return internal_error(str(error))
