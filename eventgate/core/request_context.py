from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import Any, Optional

"""
Core Request Context.

Rôle (fonctionnel) :
- Porte le request_id de la requête courante (ContextVar, compatible async).
- Extrait l’IP client d’une requête entrante (reverse proxy inclus).

Ordre de résolution de l’IP :
1. header X-Real-IP
2. premier élément de X-Forwarded-For
3. adresse du socket client (request.client.host)

Notes :
- extract_ip() accepte n’importe quel objet exposant .headers et .client
  (starlette Request en pratique) ; None donne une IP vide.
"""

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(rid: str | None) -> None:
    _request_id.set(rid)


def get_request_id() -> str | None:
    return _request_id.get()


def ensure_request_id(incoming: str | None = None) -> str:
    """Réutilise le request_id entrant (nettoyé) ou génère un UUID."""
    rid = (incoming or "").strip() or str(uuid.uuid4())
    set_request_id(rid)
    return rid


def extract_ip(request: Optional[Any]) -> str:
    """Retourne l’IP client de la requête, ou "" si introuvable."""
    if request is None:
        return ""

    headers = getattr(request, "headers", None) or {}

    real_ip = (headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip

    forwarded = headers.get("x-forwarded-for") or ""
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    client = getattr(request, "client", None)
    if client is not None and client.host:
        return client.host
    return ""
