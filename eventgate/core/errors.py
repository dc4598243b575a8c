from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException

"""
Core Errors.

Rôle (fonctionnel) :
- Définit la taxonomie d’erreurs du serveur :
  - EventGateError : racine de toutes les erreurs applicatives
  - InvalidFactError : entrée invalide (fact absent) -> remontée à l’appelant
  - StartupError : erreur fatale au démarrage (le serveur ne doit pas servir de trafic)
    - AuthorizationError : impossible de construire le service d’autorisation
  - EventLogError : journal des events impossible à ouvrir (fatal au démarrage) ou à écrire (500)
- Standardise le format des erreurs renvoyées par l’API (payload homogène).
- Fournit une exception HTTP applicative (AppHTTPException).

Convention de réponse (exemple) :
{
  "error": {
    "code": "UNAUTHORIZED",
    "message": "Token invalide ou manquant",
    "status": 401,
    "request_id": "...",
    "timestamp": "...",
    "details": {...}
  }
}

Notes :
- Les erreurs de résolution geo (GeoResolverError) vivent dans services.geo :
  elles sont “soft” et ne sortent jamais du preprocessing.
"""


class EventGateError(Exception):
    """Racine des erreurs applicatives."""


class InvalidFactError(EventGateError, ValueError):
    """Fact absent ou inexploitable passé au preprocessing."""


class StartupError(EventGateError):
    """Erreur fatale pendant l’initialisation du registre."""


class AuthorizationError(StartupError):
    """Le service d’autorisation ne peut pas être construit."""


class EventLogError(EventGateError):
    """Le journal des events ne peut pas être ouvert ou écrit."""


def now_iso() -> str:
    """Timestamp ISO-8601 en UTC (utilisé dans toutes les erreurs)."""
    return datetime.now(timezone.utc).isoformat()


def error_payload(
    *,
    code: str,
    message: str,
    status: int,
    request_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """Construit un payload d’erreur homogène pour l’API."""
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "status": status,
            "request_id": request_id,
            "timestamp": now_iso(),
        }
    }
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppHTTPException(HTTPException):
    """
    Exception HTTP standardisée.

    Exemple :
        raise AppHTTPException(401, "UNAUTHORIZED", "Token invalide ou manquant")
    """

    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        super().__init__(status_code=status_code, detail={"code": code, "message": message, "details": details})
