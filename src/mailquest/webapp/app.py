"""Flask application factory."""

import logging

from flask import Flask, jsonify

from .config import Config
from .services.engine_service import EXTENSION_KEY, build_engine

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    app.extensions[EXTENSION_KEY] = build_engine(app.config)
    logger.info(f"Mailquest engine ready (storage: {app.config['STORAGE_BACKEND'].value})")

    # Register blueprints
    from .routes import incidents, investigations, purchases, sessions

    app.register_blueprint(sessions.bp)
    app.register_blueprint(purchases.bp)
    app.register_blueprint(incidents.bp)
    app.register_blueprint(investigations.bp)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"success": False, "error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"success": False, "error": "Method not allowed"}), 405

    return app


def main():
    """Entry point for `mailquest-web` command."""
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    app.run(debug=True, host="0.0.0.0", port=5000)


if __name__ == "__main__":
    main()
