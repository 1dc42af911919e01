"""Flask application factory."""
from flask import Flask, jsonify
from flask_wtf.csrf import CSRFProtect, CSRFError
from orderhub.database import init_db
import os


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Initialize CSRF protection
    CSRFProtect(app)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        app.logger.warning(f"CSRF Error: {e.description}")
        return jsonify({'status': 'error', 'message': 'Your session has expired. Reload the page.'}), 400

    # Initialize Sentry for error tracking in production
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Setup Prometheus metrics instrumentation
    from orderhub.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Initialize database
    init_db(app)

    # Load user context before each request
    from orderhub.middleware import load_user

    @app.before_request
    def before_request_handler():
        load_user()

    # Error Handlers
    from orderhub.exceptions import OrderHubError, PersistenceError

    @app.errorhandler(OrderHubError)
    def handle_orderhub_error(error):
        """Handle custom application exceptions."""
        if isinstance(error, PersistenceError):
            # Cause is for diagnostics only
            app.logger.error(f"PersistenceError [{error.stage}]: {error.cause}")
        else:
            app.logger.warning(f"{type(error).__name__} [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'status': 'error', 'message': 'Method Not Allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        import traceback
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from orderhub.blueprints.auth import auth_bp
    from orderhub.blueprints.catalog import catalog_bp
    from orderhub.blueprints.orders import orders_bp
    from orderhub.blueprints.partnerships import partnerships_bp
    from orderhub.blueprints.metrics import metrics_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(partnerships_bp)
    app.register_blueprint(metrics_bp)

    # Register CLI commands
    from orderhub.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
