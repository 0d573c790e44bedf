"""Flask application factory."""
import logging
from flask import Flask, jsonify


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    
    # Configure logging
    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    
    # Initialize database (schema + additive columns)
    from pos.database import init_db, get_session
    init_db(app)
    
    # Bootstrap admin account
    from pos.services.user_service import ensure_admin_account
    with app.app_context():
        ensure_admin_account(
            get_session(),
            app.config.get('DEFAULT_ADMIN_USERNAME', 'admin'),
            app.config.get('DEFAULT_ADMIN_PASSWORD', 'admin123'),
        )
    
    from pos.middleware import load_user

    @app.before_request
    def before_request_handler():
        """Load user context for each request."""
        load_user()

    # Error Handlers
    from pos.exceptions import PosError

    @app.errorhandler(PosError)
    def handle_pos_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"PosError [{error.status_code}]: {error.message}")
        else:
            app.logger.info(f"PosError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'status': 'error', 'message': 'Method Not Allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from pos.blueprints.auth import auth_bp
    from pos.blueprints.catalog import catalog_bp
    from pos.blueprints.customers import customers_bp
    from pos.blueprints.sales import sales_bp
    from pos.blueprints.reports import reports_bp
    from pos.blueprints.invoices import invoices_bp
    
    app.register_blueprint(auth_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(invoices_bp)

    @app.route('/health')
    def health_check():
        """Health check endpoint."""
        return {'status': 'healthy'}

    # CLI commands
    from pos.cli_commands import init_cli_commands
    init_cli_commands(app)
    
    return app
