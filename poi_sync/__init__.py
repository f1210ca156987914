import atexit
import logging

from flask import Flask
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix
from bson import ObjectId
from datetime import datetime

from config import Config
from .errors import handle_exception
from .core.container import ServiceContainer, EXTENSION_KEY

logger = logging.getLogger(__name__)


# Custom JSON Provider to handle MongoDB ObjectId and datetime (Flask 3.x)
class MongoJSONProvider(DefaultJSONProvider):
    def default(self, obj):
        if isinstance(obj, ObjectId):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def create_app(config_class=Config, overrides=None):
    """
    Application factory.

    Args:
        config_class: Configuration class
        overrides: Optional {service key: instance} replacing the default
            wiring (tests inject fakes for the store, cache and provider)
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Setup logging (console + file)
    from .common.logging_config import setup_logging
    setup_logging(app)

    app.json = MongoJSONProvider(app)

    if app.config["PROXY_FIX_X_FOR"] > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=app.config["PROXY_FIX_X_FOR"])

    from .middleware import init_correlation_id, CORRELATION_ID_HEADER
    init_correlation_id(app)

    CORS(app, resources={r"/*": {
        "origins": "*",
        "methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": "*",
        "expose_headers": ["Retry-After", CORRELATION_ID_HEADER]
    }})

    from .config.di_setup import init_di
    container = ServiceContainer()
    init_di(container, config_class)
    for key, instance in (overrides or {}).items():
        container.register(key, lambda _c, instance=instance: instance)
    app.extensions[EXTENSION_KEY] = container

    _bootstrap_store(container)

    from .controller.places import init_app as places_api_init
    app.register_blueprint(places_api_init(container))

    from .controller.sync import init_app as sync_api_init
    app.register_blueprint(sync_api_init(container))

    from .controller.health import init_app as health_api_init
    app.register_blueprint(health_api_init())

    app.register_error_handler(Exception, handle_exception)

    if not app.config.get("API_KEY_VALUE"):
        logger.warning("[INIT] API_KEY_VALUE is not set, API key guard disabled")

    if not app.config.get("TESTING"):
        atexit.register(_shutdown, container)

    return app


def _bootstrap_store(container: ServiceContainer):
    """Create MongoDB indexes; the app still starts if MongoDB is down."""
    from .core.clients.mongodb_client import MongoDBClient
    try:
        mongodb_client: MongoDBClient = container.resolve(MongoDBClient.__name__)
        mongodb_client.create_indexes()
        logger.info("[INIT] MongoDB indexes created/verified")
    except Exception as e:
        logger.warning(f"[INIT] MongoDB initialization failed: {e}")
        logger.warning("[INIT] Place store unavailable until MongoDB is reachable")


def _shutdown(container: ServiceContainer):
    """Drain background executors, then close the MongoDB pool."""
    from .core.clients.mongodb_client import MongoDBClient
    from .service.places_service import PlacesService
    from .sync.sync_job_runner import SyncJobRunner

    built = container.resolved_keys()
    for key in (SyncJobRunner.__name__, PlacesService.__name__):
        if key in built:
            container.resolve(key).shutdown(wait=True)
    if MongoDBClient.__name__ in built:
        container.resolve(MongoDBClient.__name__).close()
