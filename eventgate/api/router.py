from fastapi import APIRouter

from .health import router as health_router
from .events import router as events_router
from .status import router as status_router

"""
Router principal de l’API.

Rôle (fonctionnel) :
- Regroupe les routeurs par domaine (health, ingestion d’events, statut système).
- Point d’entrée unique pour l’inclusion dans l’application FastAPI.
"""

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(events_router)
api_router.include_router(status_router)
