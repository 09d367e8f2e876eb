"""Schemas Pydantic pour le point d'acces /api/schedule."""

from pydantic import BaseModel, ConfigDict, Field

from app.services.booking import BookingRequest


class ScheduleRequest(BaseModel):
    """Corps de la requete pour POST /api/schedule.

    Les champs obligatoires sont verifies par le service de reservation,
    qui renvoie la liste des champs manquants.
    """

    model_config = ConfigDict(populate_by_name=True)

    start_iso: str | None = Field(None, alias="startIso")
    end_iso: str | None = Field(None, alias="endIso")
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    readable_slot: str | None = Field(None, alias="readableSlot")
    description: str | None = None
    valor_fipe: float | None = Field(None, alias="valorFipe", ge=0)
    valor_proposta: float | None = Field(None, alias="valorProposta", ge=0)

    def to_booking(self) -> BookingRequest:
        return BookingRequest(**self.model_dump())
