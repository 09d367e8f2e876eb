"""Schema commun des reponses d'erreur API."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Enveloppe d'erreur uniforme.

    {"ok": false, "error": "message lisible", "details": "..."}
    ``details`` n'est renseigne qu'en mode debug.
    """

    ok: bool = False
    error: str
    details: str | None = None
    conflict: bool | None = None
