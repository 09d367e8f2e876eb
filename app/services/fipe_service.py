"""Service FIPE -- consulte la valeur de reference d'un vehicule par sa plaque.

API : GET {FIPE_API_URL}/placas/{plaque}?key={FIPE_API_KEY}
Sans cle configuree, un vehicule de demonstration est retourne (mode simule).
"""

import logging
import re
from dataclasses import dataclass

import httpx

from app.errors import UpstreamError, UpstreamUnavailable, ValidationError, VehicleNotFoundError
from app.services.pricing import DISCOUNT_RATE, Quote, build_quote

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://placas.fipeapi.com.br"

# Valeur du .env d'exemple : equivaut a "pas de cle"
_PLACEHOLDER_KEY = "your_api_key_here"

# Ancien format (ABC1234) et format Mercosul (ABC1D23)
_PLATE_RE = re.compile(r"^[A-Z]{3}[0-9][A-Z0-9][0-9]{2}$")


@dataclass(frozen=True)
class FipeVehicle:
    """Vehicule retourne par la consultation de plaque."""

    plate: str
    model: str
    year: str
    reference_value: int | float


# Vehicule de demonstration du mode simule
MOCK_VEHICLE = FipeVehicle(
    plate="",
    model="Toyota Corolla XEi 2.0 Flex 16V Aut.",
    year="2020",
    reference_value=85000,
)


def normalize_plate(raw: str | None) -> str:
    """Met une plaque au format canonique (majuscules, sans separateur).

    Raises:
        ValidationError: Si la plaque est vide ou hors format bresilien.
    """
    plate = re.sub(r"[^A-Za-z0-9]", "", raw or "").upper()
    if not _PLATE_RE.match(plate):
        raise ValidationError("Placa inválida")
    return plate


def is_configured(api_key: str | None) -> bool:
    return bool(api_key) and api_key != _PLACEHOLDER_KEY


def _parse_vehicle(plate: str, payload: dict) -> FipeVehicle:
    """Extrait modele, annee et valeur de la reponse FIPE."""
    data = payload.get("data") or {}
    fipes = data.get("fipes") or []
    if not fipes:
        raise VehicleNotFoundError("Dados do veículo não encontrados")

    veiculo = data.get("veiculo") or {}
    fipe_info = fipes[0]
    try:
        reference_value = fipe_info["valor"]
    except KeyError as exc:
        raise UpstreamError("Resposta FIPE sem valor") from exc

    # "2020/2020" -> annee de fabrication
    raw_year = veiculo.get("ano") or ""
    year = raw_year.split("/")[0] if raw_year else "N/A"

    return FipeVehicle(
        plate=plate,
        model=fipe_info.get("marca_modelo") or veiculo.get("marca_modelo") or "",
        year=year,
        reference_value=reference_value,
    )


def lookup_plate(
    plate: str,
    api_key: str,
    base_url: str = DEFAULT_API_URL,
    timeout: float = 10.0,
) -> FipeVehicle:
    """Consulte l'API FIPE pour une plaque deja normalisee.

    Raises:
        VehicleNotFoundError: Plaque inconnue (404 ou liste FIPE vide).
        UpstreamError: Cle refusee ou reponse inexploitable.
        UpstreamUnavailable: API injoignable, saturee (429) ou en erreur serveur.
    """
    url = f"{base_url.rstrip('/')}/placas/{plate}"
    try:
        resp = httpx.get(url, params={"key": api_key}, timeout=timeout)
    except httpx.HTTPError as exc:
        logger.error("FIPE API unreachable: %s", exc)
        raise UpstreamUnavailable("Serviço FIPE indisponível") from exc

    if resp.status_code == 404:
        raise VehicleNotFoundError("Veículo não encontrado na base FIPE")
    if resp.status_code in (401, 403):
        logger.error("FIPE API rejected the key (HTTP %d)", resp.status_code)
        raise UpstreamError("Consulta FIPE recusada")
    if resp.status_code == 429 or resp.status_code >= 500:
        logger.error("FIPE API error %d: %s", resp.status_code, resp.text[:200])
        raise UpstreamUnavailable("Serviço FIPE indisponível")
    if resp.status_code != 200:
        logger.warning("FIPE API returned %d for %s: %s", resp.status_code, plate, resp.text[:200])
        raise VehicleNotFoundError("Veículo não encontrado na base FIPE")

    try:
        payload = resp.json()
    except ValueError as exc:
        raise UpstreamError("Resposta FIPE ilegível") from exc

    vehicle = _parse_vehicle(plate, payload)
    logger.debug("FIPE %s -> %s %s = %s", plate, vehicle.model, vehicle.year, vehicle.reference_value)
    return vehicle


def get_quote(
    plate: str | None,
    mileage: float | None,
    api_key: str | None,
    base_url: str = DEFAULT_API_URL,
    timeout: float = 10.0,
    discount_rate: float = DISCOUNT_RATE,
    fallback_to_mock: bool = True,
) -> Quote:
    """Calcule la cotation d'un vehicule.

    Le kilometrage est obligatoire mais n'entre pas (encore) dans le calcul.

    Raises:
        ValidationError: Plaque ou kilometrage absent ou invalide.
        VehicleNotFoundError, UpstreamError: Voir ``lookup_plate``.
    """
    if plate is None or mileage is None:
        raise ValidationError("Dados incompletos")
    plate = normalize_plate(plate)
    if mileage < 0:
        raise ValidationError("Quilometragem inválida")

    if not is_configured(api_key):
        logger.warning("FIPE_API_KEY non configuree -- cotation simulee pour %s", plate)
        return _mock_quote(discount_rate)

    try:
        vehicle = lookup_plate(plate, api_key, base_url=base_url, timeout=timeout)
    except UpstreamUnavailable:
        if not fallback_to_mock:
            raise
        logger.warning("FIPE indisponible -- cotation simulee pour %s", plate)
        return _mock_quote(discount_rate)

    logger.info("Quote %s (%s km): %s -> %s", plate, mileage, vehicle.model, vehicle.reference_value)
    return build_quote(vehicle.model, vehicle.year, vehicle.reference_value, discount_rate)


def _mock_quote(discount_rate: float) -> Quote:
    return build_quote(
        MOCK_VEHICLE.model,
        MOCK_VEHICLE.year,
        MOCK_VEHICLE.reference_value,
        discount_rate,
        is_mocked=True,
    )
