"""Schemas Pydantic pour le point d'acces /api/quote."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class QuoteRequest(BaseModel):
    """Corps de la requete pour POST /api/quote.

    Accepte aussi les cles portugaises historiques du site (placa, km, nome).
    """

    model_config = ConfigDict(populate_by_name=True)

    plate: str | None = Field(None, validation_alias=AliasChoices("plate", "placa"))
    mileage: float | None = Field(None, validation_alias=AliasChoices("mileage", "km"))
    name: str | None = Field(None, validation_alias=AliasChoices("name", "nome"))
