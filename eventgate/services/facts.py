from __future__ import annotations

from typing import Any, Dict, Optional

"""
Facts.

Un fact est un event de tracking “brut” : dict JSON (clés str, valeurs dynamiques).
Les accesseurs ci-dessous lisent une valeur typée et retournent None si la clé est
absente ou si le type ne correspond pas (pas d’exception sur un fact mal formé).
"""

Fact = Dict[str, Any]

SRC_KEY = "src"
SOURCE_IP_KEY = "source_ip"
DEVICE_CTX_KEY = "device_ctx"
IP_KEY = "ip"
UA_KEY = "ua"


def get_object(mapping: Fact, key: str) -> Optional[Fact]:
    value = mapping.get(key)
    return value if isinstance(value, dict) else None


def get_string(mapping: Fact, key: str) -> Optional[str]:
    value = mapping.get(key)
    return value if isinstance(value, str) else None
