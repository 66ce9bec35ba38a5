from flask import Flask
import atexit
import logging

from .database import Database


def init_db(app, client=None) -> Database:
    """Open the MongoDB connection pool for this app and close it at interpreter exit."""
    database = Database()
    try:
        database.init_app(app, client=client)
    except (ConnectionError, ValueError) as e:
        app.logger.error(f"Failed to initialize database: {e}")
        raise
    atexit.register(database.close)
    return database


def create_app(config_object, mongo_client=None, genai_client=None):
    """Create and configure the Flask application"""
    app = Flask(__name__)

    # Configure logging first
    logging.basicConfig(level=logging.INFO)
    app.logger.setLevel(logging.INFO)

    # Load configuration
    try:
        app.config.from_object(config_object)
    except Exception as e:
        app.logger.error(f"Failed to load configuration: {e}")
        raise

    database = init_db(app, client=mongo_client)

    # Register blueprints and wire the services they use
    try:
        from .routes.main import main_bp, init_route_dependencies
        from .routes.generation import generation_bp
        app.register_blueprint(main_bp)
        app.register_blueprint(generation_bp)

        with app.app_context():
            init_route_dependencies(app, database, genai_client=genai_client)

    except Exception as e:
        app.logger.error(f"Failed to initialize application routes: {e}")
        raise

    @app.route('/')
    def index():
        return "Newsroom backend is running!"

    if not app.config.get('GOOGLE_API_KEY'):
        app.logger.warning("No generation API key configured; generation endpoints are disabled")

    return app


__all__ = ['create_app', 'init_db']
