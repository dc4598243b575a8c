from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any, Optional

from eventgate.core.errors import InvalidFactError
from eventgate.core.request_context import extract_ip
from eventgate.services.facts import (
    DEVICE_CTX_KEY,
    IP_KEY,
    SOURCE_IP_KEY,
    SRC_KEY,
    UA_KEY,
    Fact,
    get_object,
    get_string,
)
from eventgate.services.geo import GEO_DATA_KEY, GeoResolver, GeoResolverError
from eventgate.services.useragent import PARSED_UA_KEY, UaResolver

if TYPE_CHECKING:
    from eventgate.core.appconfig import AppConfig

"""
API Preprocessor.

Rôle (fonctionnel) :
- Prépare un fact reçu via l’API (intégration server-to-server) avant écriture aval.
- Marque la source (src = "api") et ajoute l’IP client extraite de la requête (source_ip).
- Enrichit device_ctx :
  - geo : résolu depuis device_ctx.ip, sauf si device_ctx.geo est déjà fourni
  - parsed_ua : résolu depuis device_ctx.ua, sauf si device_ctx.parsed_ua est déjà fourni

Comportement :
- Les valeurs déjà fournies par l’appelant sont prioritaires (aucun appel resolver).
- Un échec de résolution geo est logué : le fact continue (valeur partielle ou null).
- Le fact est modifié sur place et retourné (même objet).
- Aucun état partagé entre appels : seuls les resolvers (lecture seule) sont conservés.
"""

log = logging.getLogger("eventgate.preprocessor")


class ApiPreprocessor:
    """Preprocessing des facts API (source + IP + enrichissement geo / user-agent)."""

    def __init__(self, geo_resolver: GeoResolver, ua_resolver: UaResolver) -> None:
        self.geo_resolver = geo_resolver
        self.ua_resolver = ua_resolver

    @classmethod
    def from_app_config(cls, app_config: "AppConfig") -> "ApiPreprocessor":
        return cls(app_config.geo_resolver, app_config.ua_resolver)

    def preprocess(self, fact: Optional[Fact], request: Optional[Any] = None) -> Fact:
        if fact is None:
            raise InvalidFactError("Le fact en entrée ne peut pas être None")

        fact[SRC_KEY] = "api"
        ip = extract_ip(request)
        if ip:
            fact[SOURCE_IP_KEY] = ip

        device_ctx = get_object(fact, DEVICE_CTX_KEY)
        if device_ctx is None:
            return fact

        # device_ctx.geo fourni par l’appelant : pas de résolution
        if GEO_DATA_KEY not in device_ctx:
            device_ip = get_string(device_ctx, IP_KEY)
            if device_ip is not None:
                device_ctx[GEO_DATA_KEY] = self._resolve_geo(device_ip)

        # idem pour device_ctx.parsed_ua
        if PARSED_UA_KEY not in device_ctx:
            ua = get_string(device_ctx, UA_KEY)
            if ua is not None:
                device_ctx[PARSED_UA_KEY] = asdict(self.ua_resolver.resolve(ua))

        return fact

    def _resolve_geo(self, ip: str) -> Optional[dict[str, Any]]:
        try:
            data = self.geo_resolver.resolve(ip)
        except GeoResolverError as exc:
            log.error("Geo resolving failed: %s", exc, extra={"ip": ip})
            data = exc.data
        return asdict(data) if data is not None else None
