"""Fabrique d'application Flask pour Repasse Auto."""

import logging
import os

from flask import Flask

from app.extensions import cors, limiter
from app.logging_config import setup_logging
from app.services.google_calendar import calendar_from_config
from app.services.holidays import load_blocked_dates
from config import config_by_name

logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """Cree et configure l'application Flask.

    Args:
        config_name: Un parmi 'development', 'testing', 'production'.
                     Par defaut, utilise la variable d'env FLASK_ENV ou 'development'.
    """
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    setup_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Dates bloquees illisibles : echec au demarrage plutot qu'a la premiere requete
    load_blocked_dates(app.config.get("BLOCKED_DATES"))

    if calendar_from_config(app.config) is None:
        logger.warning("Google Calendar non configure -- agenda en mode simule")
    if not app.config.get("FIPE_API_KEY"):
        logger.warning("FIPE_API_KEY non configuree -- cotations simulees")

    # Initialisation des extensions
    cors.init_app(app, origins=app.config["CORS_ORIGINS"])
    limiter.init_app(app)

    # Headers de securite HTTP
    @app.after_request
    def add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return resp

    # Enregistrement des blueprints
    from app.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    logger.info("Repasse Auto app created with config '%s'", config_name)
    return app
