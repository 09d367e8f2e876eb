"""Hierarchie d'exceptions Repasse Auto.

Regles :
  - Ne jamais utiliser ``except Exception`` nu. Toujours attraper un type specifique.
  - Les services levent ces exceptions ; seul le blueprint API les traduit en JSON.
  - Le message d'une exception est destine au client (portugais) : jamais de secret dedans.
"""


class RepasseError(Exception):
    """Exception de base pour toutes les erreurs Repasse Auto."""

    status_code = 500


class ValidationError(RepasseError):
    """Les donnees d'entree n'ont pas passe la validation."""

    status_code = 400


class VehicleNotFoundError(RepasseError):
    """La plaque est inconnue de la base FIPE."""

    status_code = 404


class ConflictError(RepasseError):
    """Le creneau vient d'etre pris par quelqu'un d'autre."""

    status_code = 409


class UpstreamError(RepasseError):
    """Un service externe (Google Calendar, FIPE) a rejete la requete."""

    status_code = 502


class UpstreamUnavailable(UpstreamError):
    """Un service externe est injoignable ou les identifiants sont refuses."""

    status_code = 503


class ConfigurationError(RepasseError):
    """Configuration invalide (cle privee mal formee, dates bloquees illisibles...)."""

    status_code = 500
