"""Gestionnaires d'erreurs API -- retournent du JSON, n'exposent jamais les stack traces."""

import logging

from flask import current_app, jsonify

from app.api import api_bp
from app.errors import (
    ConfigurationError,
    ConflictError,
    RepasseError,
    UpstreamError,
    ValidationError,
    VehicleNotFoundError,
)
from app.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(message: str, status: int, exc: Exception | None = None, **extra):
    """Construit la reponse JSON d'erreur ; ``details`` seulement en debug."""
    body = ErrorResponse(error=message, **extra)
    if exc is not None and current_app.debug:
        body.details = f"{type(exc).__name__}: {exc}"
    return jsonify(body.model_dump(exclude_none=True)), status


@api_bp.errorhandler(ValidationError)
def handle_validation_error(exc):
    logger.warning("Validation error: %s", exc)
    return error_response(str(exc), exc.status_code)


@api_bp.errorhandler(VehicleNotFoundError)
def handle_vehicle_not_found(exc):
    logger.info("Vehicle not found: %s", exc)
    return error_response(str(exc), exc.status_code)


@api_bp.errorhandler(ConflictError)
def handle_conflict(exc):
    logger.info("Booking conflict: %s", exc)
    return error_response(str(exc), exc.status_code, conflict=True)


@api_bp.errorhandler(UpstreamError)
def handle_upstream_error(exc):
    logger.error("Upstream error: %s", exc)
    return error_response(str(exc), exc.status_code, exc)


@api_bp.errorhandler(ConfigurationError)
def handle_configuration_error(exc):
    logger.error("Configuration error: %s", exc)
    return error_response("Serviço mal configurado. Tente novamente mais tarde.", 500, exc)


@api_bp.errorhandler(RepasseError)
def handle_repasse_error(exc):
    logger.error("Repasse error: %s", exc)
    return error_response("Ocorreu um erro. Tente novamente.", exc.status_code, exc)


@api_bp.errorhandler(404)
def handle_not_found(exc):
    return error_response("Rota não encontrada.", 404)


@api_bp.errorhandler(405)
def handle_method_not_allowed(exc):
    return error_response("Método não permitido.", 405)


@api_bp.errorhandler(500)
def handle_internal_error(exc):
    logger.error("Unhandled error: %s", exc)
    return error_response("Erro interno do servidor.", 500)
