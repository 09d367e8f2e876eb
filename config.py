"""Classes de configuration pour l'application Repasse Auto."""

import os


def _env_bool(name: str, default: bool) -> bool:
    """Lit un booleen depuis l'environnement ("1", "true", "yes", "on")."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration de base (production)."""

    APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")

    # CORS -- le site vitrine appelle l'API depuis son propre domaine
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "https://repasseautors.com.br").split(",")

    # Google Calendar (compte de service). Absent -> mode simule.
    GOOGLE_SERVICE_ACCOUNT_EMAIL = os.environ.get("GOOGLE_SERVICE_ACCOUNT_EMAIL", "")
    GOOGLE_PRIVATE_KEY = os.environ.get("GOOGLE_PRIVATE_KEY", "")
    GOOGLE_CALENDAR_ID = os.environ.get("GOOGLE_CALENDAR_ID", "")

    # API FIPE (consultation par plaque)
    FIPE_API_KEY = os.environ.get("FIPE_API_KEY", "")
    FIPE_API_URL = os.environ.get("FIPE_API_URL", "https://placas.fipeapi.com.br")
    FIPE_API_TIMEOUT = int(os.environ.get("FIPE_API_TIMEOUT", "10"))
    QUOTE_FALLBACK_TO_MOCK = _env_bool("QUOTE_FALLBACK_TO_MOCK", True)

    # Tarification : remise fixe sur la valeur FIPE
    OFFER_DISCOUNT_RATE = 0.18

    # Plages de vistoria (heure locale UTC-3)
    WORK_MORNING = (9, 11)
    WORK_AFTERNOON = (14, 18)
    VISIT_DURATION_MINUTES = 60
    BOOKING_BUFFER_MINUTES = 30
    MAX_SLOTS_PER_WINDOW = 4
    AVAILABILITY_HORIZON_DAYS = 30
    MOCK_HORIZON_DAYS = 15
    AVAILABILITY_FALLBACK_TO_MOCK = _env_bool("AVAILABILITY_FALLBACK_TO_MOCK", True)

    # Dates bloquees en plus des feriados (ex. "2026-12-24,2026-12-31")
    BLOCKED_DATES = os.environ.get("BLOCKED_DATES", "")

    # Journalisation
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class DevConfig(Config):
    """Configuration de developpement."""

    DEBUG = True
    LOG_LEVEL = "DEBUG"
    CORS_ORIGINS = ["*"]


class TestConfig(Config):
    """Configuration de test.

    Aucun identifiant externe : les tests qui ont besoin du calendrier
    ou de la FIPE injectent leurs propres doubles.
    """

    TESTING = True
    GOOGLE_SERVICE_ACCOUNT_EMAIL = ""
    GOOGLE_PRIVATE_KEY = ""
    GOOGLE_CALENDAR_ID = ""
    FIPE_API_KEY = ""
    BLOCKED_DATES = ""
    AVAILABILITY_FALLBACK_TO_MOCK = True
    QUOTE_FALLBACK_TO_MOCK = True
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "DEBUG"


config_by_name = {
    "development": DevConfig,
    "testing": TestConfig,
    "production": Config,
}
