"""Schemas Pydantic pour le point d'acces /api/availability."""

from pydantic import BaseModel, ConfigDict, Field


class SlotSchema(BaseModel):
    """Creneau tel qu'expose au site."""

    start: str
    end: str
    display: str


class AvailabilityResponse(BaseModel):
    """Reponse de GET /api/availability."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    slots: list[SlotSchema] = []
    mock: bool | None = None
    calendar_id: str | None = Field(None, serialization_alias="calendarId")
    error: str | None = None
