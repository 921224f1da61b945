from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (engine + scoped_session)
from services.checkout import BACKENDS as CHECKOUT_BACKENDS
from services.seeding import seed_default_accounts
from utils.log import configure_logging, init_request_logging

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Bookstore API",
        "version": "1.0.0",
        "description": "REST API for a bookstore: catalog, cart, orders, reviews, addresses and admin reports.",
    },
    "basePath": "/",
    "schemes": ["http"],
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


def create_app(config_name: str | None = None, overrides: dict | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `overrides` is applied on top of the selected config class (tests use it
    to point DATABASE_URL at a temporary database).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)
    if app.config["CHECKOUT_BACKEND"] not in CHECKOUT_BACKENDS:
        raise ValueError(
            f"CHECKOUT_BACKEND must be one of {', '.join(CHECKOUT_BACKENDS)}, got {app.config['CHECKOUT_BACKEND']!r}"
        )

    configure_logging(app)

    storage.configure(
        app.config["DATABASE_URL"],
        pool_size=app.config["DB_POOL_SIZE"],
        max_overflow=app.config["DB_MAX_OVERFLOW"],
        pool_timeout=app.config["DB_POOL_TIMEOUT"],
        pool_recycle=app.config["DB_POOL_RECYCLE"],
    )
    storage.reload()

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Uniform error envelope for every failure
    register_error_handlers(app)
    init_request_logging(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .books import bp as books_bp
    from .authors import bp as authors_bp
    from .categories import bp as categories_bp
    from .publishers import bp as publishers_bp
    from .addresses import bp as addresses_bp
    from .cart import bp as cart_bp
    from .orders import bp as orders_bp
    from .reviews import bp as reviews_bp
    from .users import bp as users_bp
    from .reports import bp as reports_bp

    prefix = app.config["API_PREFIX"]
    app.register_blueprint(health_bp)
    for blueprint in (
        auth_bp, books_bp, authors_bp, categories_bp, publishers_bp, addresses_bp,
        cart_bp, orders_bp, reviews_bp, users_bp, reports_bp,
    ):
        app.register_blueprint(blueprint, url_prefix=prefix)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # This calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Bookstore API",
            "docs": "/apidocs/",
            "health": "/health",
        }, 200

    if app.config.get("SEED_DEFAULT_ACCOUNTS"):
        seed_default_accounts(app.config)

    return app
