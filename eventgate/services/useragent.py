from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

from user_agents import parse as parse_user_agent

"""
User-Agent Resolver.

Rôle (fonctionnel) :
- Définit le contrat UaResolver : user-agent (str) -> ParsedUa, sans canal d’erreur.
- Implémentation basée sur la librairie user-agents (famille navigateur / OS / device, bot).

Notes :
- Best-effort : un user-agent non parsable donne un ParsedUa vide.
- Les user-agents sont très répétitifs : les résultats sont mis en cache (LRU).
"""

log = logging.getLogger("eventgate.useragent")

PARSED_UA_KEY = "parsed_ua"


@dataclass(frozen=True)
class ParsedUa:
    """Résultat de parsing (stocké dans device_ctx.parsed_ua)."""
    ua_family: str = ""
    ua_version: str = ""
    os_family: str = ""
    os_version: str = ""
    device_family: str = ""
    bot: bool = False


class UaResolver(Protocol):
    def resolve(self, user_agent: str) -> ParsedUa:
        ...


class UserAgentResolver:
    """Resolver user-agent (cache LRU par instance)."""

    def __init__(self, cache_size: int = 10_000) -> None:
        self._cached_parse = lru_cache(maxsize=cache_size)(self._parse)

    def resolve(self, user_agent: str) -> ParsedUa:
        return self._cached_parse(user_agent)

    @staticmethod
    def _parse(user_agent: str) -> ParsedUa:
        try:
            ua = parse_user_agent(user_agent)
        except Exception as exc:
            log.warning("Failed to parse user agent %r: %s", user_agent[:100], exc)
            return ParsedUa()

        return ParsedUa(
            ua_family=ua.browser.family or "",
            ua_version=ua.browser.version_string or "",
            os_family=ua.os.family or "",
            os_version=ua.os.version_string or "",
            device_family=ua.device.family or "",
            bot=bool(ua.is_bot),
        )
