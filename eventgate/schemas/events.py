from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

"""
Schemas Events (Pydantic).

Rôle (fonctionnel) :
- Définit les réponses HTTP des endpoints d’ingestion et de statut.
- Le fact entrant reste un dict JSON libre (pas de schéma imposé sur les events).
"""


class EventAccepted(BaseModel):
    """Réponse d’ingestion d’un event."""
    status: str = "ok"


class GeoStatus(BaseModel):
    available: bool


class SystemStatus(BaseModel):
    """Statut système exposé pour monitoring / UI."""
    ok: bool
    server_name: str
    authority: str
    public_url: Optional[str] = None
    geo: GeoStatus
    metrics_enabled: bool
    ts: str
