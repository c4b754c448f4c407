from flask import Flask
from flasgger import Swagger
from flask_cors import CORS
import logging

from .config import get_config, DEFAULT_ACCESS_SECRET, DEFAULT_REFRESH_SECRET
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from utils.tokens import TokenCodec

logger = logging.getLogger(__name__)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "VideoHub Account API",
        "version": "1.0.0",
        "description": "Account registration, login, logout and refresh-token rotation for the VideoHub platform.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(app.config.get("LOG_LEVEL", "INFO"))

    if not (app.debug or app.testing) and (
        app.config["ACCESS_TOKEN_SECRET"] == DEFAULT_ACCESS_SECRET
        or app.config["REFRESH_TOKEN_SECRET"] == DEFAULT_REFRESH_SECRET
    ):
        logger.warning("token secrets are the built-in defaults; set ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET")

    # Cookies carry the tokens, so cross-origin callers must send credentials
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    app.extensions["token_codec"] = TokenCodec.from_config(app.config)
    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/users")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to VideoHub Account API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
