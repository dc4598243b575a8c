from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from eventgate.api.deps import get_app_config
from eventgate.core.appconfig import AppConfig

"""
API Health.

Rôle (fonctionnel) :
- /ping : réponse texte minimale (sondes load balancer).
- /health : vérifie que le serveur répond et expose son nom.
"""

router = APIRouter()


@router.get("/ping", response_class=PlainTextResponse)
def ping():
    return "pong"


@router.get("/health")
def health(app_config: AppConfig = Depends(get_app_config)):
    return {
        "status": "ok",
        "server": app_config.server_name,
    }
