from __future__ import annotations

import json
import logging
import secrets
import threading
from pathlib import Path
from typing import Iterable, Optional

from fastapi import Request

from eventgate.core.errors import AuthorizationError
from eventgate.core.settings import ServerSettings

"""
Core Security (tokens API).

Rôle (fonctionnel) :
- Fournit le service d’autorisation des events entrants (tokens).
- Supporte trois formats côté client :
  - query string : ?token=<token>
  - Authorization: Bearer <token>
  - X-API-Key: <token>

Sources de tokens :
- server.auth_file : fichier JSON (liste de tokens), rechargé toutes les server.auth_reload_sec
  secondes par un thread dédié (fermé par AppConfig.close()).
- server.auth : liste statique.
- Aucun token :
  - ENV=prod : erreur fatale (le serveur ne démarre pas)
  - sinon : un token aléatoire est généré et logué (pratique en dev / local)

Notes :
- compare_digest() est utilisé pour éviter les comparaisons sensibles au timing.
- Un rechargement en échec garde les tokens précédents (logué en error).
"""

log = logging.getLogger("eventgate.auth")


def load_tokens(path: str | Path) -> frozenset[str]:
    """Charge une liste de tokens depuis un fichier JSON ; ValueError/OSError si invalide."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, list) or not all(isinstance(t, str) for t in payload):
        raise ValueError(f"{path} doit contenir une liste JSON de tokens")
    return frozenset(t.strip() for t in payload if t.strip())


class AuthorizationService:
    """Vérifie les tokens des requêtes entrantes."""

    def __init__(
        self,
        tokens: Iterable[str],
        *,
        tokens_file: str = "",
        reload_sec: int = 30,
    ) -> None:
        self._lock = threading.Lock()
        self._tokens = frozenset(tokens)
        self._tokens_file = tokens_file
        self._reload_sec = reload_sec
        self._stop = threading.Event()
        self._reloader: Optional[threading.Thread] = None

    @classmethod
    def from_settings(cls, server: ServerSettings, env: str = "dev") -> "AuthorizationService":
        if server.auth_file:
            try:
                tokens = load_tokens(server.auth_file)
            except (OSError, ValueError) as exc:
                raise AuthorizationError(f"Impossible de charger les tokens depuis {server.auth_file}: {exc}") from exc
            service = cls(tokens, tokens_file=server.auth_file, reload_sec=server.auth_reload_sec)
            service.start_reloading()
            return service

        tokens = [t.strip() for t in server.auth if t.strip()]
        if not tokens:
            if env.lower() == "prod":
                raise AuthorizationError("Aucun token configuré (server.auth / server.auth_file)")
            generated = secrets.token_urlsafe(24)
            log.warning("No auth tokens configured, generated token: %s", generated)
            tokens = [generated]
        return cls(tokens)

    @property
    def tokens(self) -> frozenset[str]:
        with self._lock:
            return self._tokens

    def authorize(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return any(secrets.compare_digest(token, known) for known in self.tokens)

    def reload(self) -> None:
        """Relit le fichier de tokens (garde l’état précédent en cas d’échec)."""
        try:
            tokens = load_tokens(self._tokens_file)
        except (OSError, ValueError) as exc:
            log.error("Auth tokens reload failed: %s", exc)
            return
        with self._lock:
            self._tokens = tokens

    def start_reloading(self) -> None:
        if self._reloader is not None or not self._tokens_file:
            return
        self._reloader = threading.Thread(target=self._reload_loop, name="auth-reloader", daemon=True)
        self._reloader.start()

    def _reload_loop(self) -> None:
        while not self._stop.wait(self._reload_sec):
            self.reload()

    def close(self) -> None:
        self._stop.set()
        if self._reloader is not None:
            self._reloader.join(timeout=self._reload_sec)
            self._reloader = None

    def __repr__(self) -> str:
        return f"AuthorizationService(tokens_file={self._tokens_file!r})"


def extract_token(request: Request) -> Optional[str]:
    """Extrait un token depuis ?token=, Authorization Bearer ou X-API-Key (si présent)."""
    token = request.query_params.get("token")
    if token:
        return token.strip()

    auth = request.headers.get("authorization")
    if auth:
        parts = auth.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1].strip()

    x_api_key = request.headers.get("x-api-key")
    if x_api_key:
        return x_api_key.strip()

    return None
