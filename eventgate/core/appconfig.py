from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Protocol

from eventgate.core.errors import AuthorizationError
from eventgate.core.identity import resolve_server_name
from eventgate.core.logging import setup_logging
from eventgate.core.security import AuthorizationService
from eventgate.core.settings import Settings
from eventgate.services.geo import GeoResolver, GeoResolverError, UnavailableGeoResolver, create_geo_resolver
from eventgate.services.useragent import UaResolver, UserAgentResolver

"""
Core AppConfig (registre de configuration et de ressources).

Rôle (fonctionnel) :
- Construit, une seule fois au démarrage, l’état partagé du serveur :
  - nom du serveur (bootstrap d’identité) + logging global
  - adresse d’écoute (authority)
  - resolvers geo / user-agent
  - service d’autorisation
- Tient la liste ordonnée des ressources à fermer à l’arrêt (schedule_closing / close).

Politique d’erreurs au démarrage :
- Service d’autorisation impossible à construire : fatal (AuthorizationError remonte).
- Base geo impossible à ouvrir : warning, le serveur tourne sans geo (UnavailableGeoResolver).

Notes :
- Après init_app_config(), les champs sont en lecture seule (lectures concurrentes sans verrou).
  Seule la liste des ressources évolue (append protégé par un verrou).
- close() est best-effort : une ressource en échec n’empêche pas la fermeture des suivantes.
"""

log = logging.getLogger("eventgate.appconfig")


class Closeable(Protocol):
    def close(self) -> None:
        ...


def listen_authority(settings: Settings) -> str:
    """Adresse d’écoute : override `port` prioritaire, sinon server.port."""
    port = settings.port or settings.server.port
    return f"0.0.0.0:{port}"


@dataclass
class AppConfig:
    """État partagé du serveur, exposé aux composants après init_app_config()."""
    server_name: str
    authority: str
    geo_resolver: GeoResolver
    ua_resolver: UaResolver
    authorization_service: AuthorizationService
    settings: Settings
    _close_me: List[Closeable] = field(default_factory=list, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _closed: bool = field(default=False, repr=False)

    def schedule_closing(self, resource: Closeable) -> None:
        """Ajoute une ressource à fermer à l’arrêt (ordre d’enregistrement conservé)."""
        with self._lock:
            if self._closed:
                raise RuntimeError("AppConfig déjà fermé")
            self._close_me.append(resource)

    def close(self) -> List[Exception]:
        """Ferme toutes les ressources dans l’ordre ; retourne les erreurs rencontrées."""
        with self._lock:
            if self._closed:
                return []
            self._closed = True
            resources = list(self._close_me)
            self._close_me.clear()

        return close_all(resources)


def close_all(resources: List[Closeable]) -> List[Exception]:
    errors: List[Exception] = []
    for resource in resources:
        try:
            resource.close()
        except Exception as exc:
            log.error("Error closing %r: %s", resource, exc, extra={"resource": repr(resource)})
            errors.append(exc)
    return errors


def init_app_config(settings: Settings) -> AppConfig:
    """
    Initialise le registre.

    Étapes :
    1) nom du serveur (config ou fichier persistant)
    2) logging global (JSON, nom du serveur injecté)
    3) authority d’écoute
    4) resolver geo (dégradé si indisponible)
    5) service d’autorisation (fatal si impossible)
    6) resolver user-agent
    """
    server = settings.server
    server_name = resolve_server_name(server.name, server.name_file)

    setup_logging(
        server.log.level,
        server_name=server_name,
        file_dir=server.log.path,
        rotation_min=server.log.rotation_min,
        max_backups=server.log.max_backups,
    )

    log.info("*** Creating new AppConfig ***")
    log.info("Server Name: %s", server_name)
    if server.public_url:
        log.info("Server public url: %s", server.public_url)
    else:
        log.warning("Server public url: will be taken from Host header")

    authority = listen_authority(settings)
    opened: List[Closeable] = []

    geo_resolver: GeoResolver
    try:
        maxmind = create_geo_resolver(settings.geo.maxmind_path)
    except GeoResolverError as exc:
        log.warning("Run without geo resolver: %s", exc)
        geo_resolver = UnavailableGeoResolver()
    else:
        opened.append(maxmind)
        geo_resolver = maxmind

    try:
        authorization_service = AuthorizationService.from_settings(server, settings.ENV)
    except AuthorizationError:
        close_all(opened)
        raise
    opened.append(authorization_service)

    app_config = AppConfig(
        server_name=server_name,
        authority=authority,
        geo_resolver=geo_resolver,
        ua_resolver=UserAgentResolver(),
        authorization_service=authorization_service,
        settings=settings,
    )
    for resource in opened:
        app_config.schedule_closing(resource)
    return app_config
