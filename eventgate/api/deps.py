from __future__ import annotations

from fastapi import Depends, Request

from eventgate.core.appconfig import AppConfig
from eventgate.core.errors import AppHTTPException
from eventgate.core.security import extract_token

"""
Dépendances API.

Rôle (fonctionnel) :
- Donne accès au registre AppConfig initialisé au démarrage (app.state.app_config).
- Protège les routes d’ingestion par token (service d’autorisation du registre).
"""


def get_app_config(request: Request) -> AppConfig:
    app_config = getattr(request.app.state, "app_config", None)
    if app_config is None:
        raise AppHTTPException(503, "NOT_READY", "Serveur en cours d’initialisation")
    return app_config


async def require_token(request: Request, app_config: AppConfig = Depends(get_app_config)) -> None:
    """Lève 401 si le token est absent ou inconnu."""
    token = extract_token(request)
    if not app_config.authorization_service.authorize(token):
        raise AppHTTPException(401, "UNAUTHORIZED", "Token invalide ou manquant")


TokenAuthDep = Depends(require_token)
