from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from eventgate.api.deps import get_app_config
from eventgate.core.appconfig import AppConfig
from eventgate.schemas.events import GeoStatus, SystemStatus

"""
API System Status.

Rôle (fonctionnel) :
- Expose l’état du serveur tel que construit au démarrage (registre AppConfig) :
  nom, adresse d’écoute, URL publique, disponibilité de la base geo, métriques.
- La base geo indisponible est un mode dégradé : ok reste vrai.
"""

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/status", response_model=SystemStatus)
def system_status(app_config: AppConfig = Depends(get_app_config)):
    return SystemStatus(
        ok=True,
        server_name=app_config.server_name,
        authority=app_config.authority,
        public_url=app_config.settings.server.public_url or None,
        geo=GeoStatus(available=bool(getattr(app_config.geo_resolver, "available", False))),
        metrics_enabled=app_config.settings.metrics.enabled,
        ts=datetime.now(timezone.utc).isoformat(),
    )
