"""Service de tarification -- proposition d'achat a partir de la valeur FIPE.

La proposition applique une remise fixe a la valeur de reference, arrondie
a l'entier inferieur. Le calcul passe par Decimal pour que 100000 x 0.82
donne exactement 82000.
"""

import math
from dataclasses import dataclass
from decimal import Decimal

# Remise fixe appliquee a la valeur FIPE
DISCOUNT_RATE = 0.18


@dataclass(frozen=True)
class Quote:
    """Cotation calculee pour une requete, jamais stockee."""

    model: str
    year: str
    reference_value: int | float
    offer_value: int
    is_mocked: bool = False

    def to_dict(self) -> dict:
        """Corps JSON de la reponse /api/quote (cles attendues par le site)."""
        data = {
            "sucesso": True,
            "modelo": self.model,
            "ano": self.year,
            "valorFipe": self.reference_value,
            "valorProposta": self.offer_value,
        }
        if self.is_mocked:
            data["mock"] = True
        return data


def compute_offer(reference_value: int | float, discount_rate: float = DISCOUNT_RATE) -> int:
    """Retourne floor(reference_value * (1 - discount_rate)).

    Raises:
        ValueError: Si la valeur de reference est negative.
    """
    if reference_value < 0:
        raise ValueError(f"Valeur de reference negative: {reference_value}")
    factor = Decimal(1) - Decimal(str(discount_rate))
    return math.floor(Decimal(str(reference_value)) * factor)


def build_quote(
    model: str,
    year: str,
    reference_value: int | float,
    discount_rate: float = DISCOUNT_RATE,
    is_mocked: bool = False,
) -> Quote:
    """Assemble une Quote a partir des donnees du vehicule."""
    return Quote(
        model=model,
        year=year,
        reference_value=reference_value,
        offer_value=compute_offer(reference_value, discount_rate),
        is_mocked=is_mocked,
    )
