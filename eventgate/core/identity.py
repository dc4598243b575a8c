from __future__ import annotations

import json
import logging
from pathlib import Path

"""
Core Server Identity.

Rôle (fonctionnel) :
- Résout le nom stable du serveur (utilisé dans les logs et le statut système).
- Priorité au nom fourni par la configuration (server.name).
- Sinon, lecture d’un petit fichier JSON persistant : {"server_name": "..."}.

Bootstrap :
- Fichier absent : créé avec {"server_name": "unnamed-server"} (JSON indenté, 2 espaces).
- Fichier vide, illisible, JSON invalide ou sans server_name : réécrit avec l’enregistrement
  par défaut, et le nom par défaut est retourné.
- Fichier valide : le nom stocké est retourné, le fichier n’est pas modifié.

Notes :
- Une écriture impossible (droits, dossier absent) est loguée en warning :
  le serveur démarre quand même avec le nom par défaut.
"""

log = logging.getLogger("eventgate.identity")

DEFAULT_SERVER_NAME = "unnamed-server"


def _default_record() -> dict[str, str]:
    return {"server_name": DEFAULT_SERVER_NAME}


def _write_default(path: Path) -> str:
    """Persiste l’enregistrement par défaut et retourne le nom par défaut."""
    record = _default_record()
    try:
        path.write_text(json.dumps(record, indent=2), encoding="utf-8")
    except OSError as exc:
        log.warning("Unable to persist server name file %s: %s", path, exc)
    return record["server_name"]


def read_server_name(path: str | Path) -> str:
    """Lit le nom du serveur depuis le fichier d’identité (bootstrap si besoin)."""
    file_path = Path(path)

    try:
        raw = file_path.read_bytes()
    except FileNotFoundError:
        return _write_default(file_path)
    except OSError as exc:
        log.warning("Unable to read server name file %s: %s", file_path, exc)
        return _write_default(file_path)

    if not raw.strip():
        return _write_default(file_path)

    try:
        record = json.loads(raw)
    except ValueError:
        log.warning("Server name file %s is corrupted, rewriting default", file_path)
        return _write_default(file_path)

    name = record.get("server_name") if isinstance(record, dict) else None
    if not isinstance(name, str) or not name:
        log.warning("Server name file %s has no server_name, rewriting default", file_path)
        return _write_default(file_path)

    return name


def resolve_server_name(configured: str, path: str | Path) -> str:
    """Nom configuré si présent, sinon nom persistant (fichier)."""
    if configured:
        return configured
    return read_server_name(path)
