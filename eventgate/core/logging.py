from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from typing import Any

from .request_context import get_request_id

"""
Core Logging.

Rôle (fonctionnel) :
- Configure un logging JSON uniforme pour tout le serveur (API + uvicorn).
- Injecte le nom du serveur et le request_id dans chaque log.
- Supporte des “extras” structurés (method, path, status_code, duration_ms, client_ip, ...).
- Optionnel : copie des logs dans un fichier avec rotation temporelle (server.log.path).

Notes :
- setup_logging() est appelé par init_app_config() une fois le nom du serveur résolu.
- Le root logger est reconfiguré à chaque appel (pas de handlers en double).
"""

MAIN_LOG_FILE = "main.log"


class RequestIdFilter(logging.Filter):
    """Ajoute request_id et server au LogRecord."""

    def __init__(self, server_name: str = "-") -> None:
        super().__init__()
        self.server_name = server_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        record.server = self.server_name
        return True


class JsonFormatter(logging.Formatter):
    """Formateur JSON (1 event = 1 ligne JSON)."""

    EXTRA_KEYS = (
        "method",
        "path",
        "status_code",
        "duration_ms",
        "client_ip",
        "ip",
        "resource",
    )

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "server": getattr(record, "server", "-"),
            "request_id": getattr(record, "request_id", "-"),
            "msg": record.getMessage(),
        }

        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(
    level: str = "INFO",
    *,
    server_name: str = "-",
    file_dir: str = "",
    rotation_min: int = 1440,
    max_backups: int = 0,
) -> None:
    """
    Initialise le logging global (root) en JSON et aligne uvicorn dessus.

    - StreamHandler stdout systématique.
    - TimedRotatingFileHandler sous file_dir si renseigné (rotation en minutes).
    """
    lvl = level.upper()

    root = logging.getLogger()
    root.setLevel(lvl)

    # Retire uniquement nos handlers (pas de doublons si réinitialisé)
    for handler in list(root.handlers):
        if getattr(handler, "_eventgate", False):
            root.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if file_dir:
        os.makedirs(file_dir, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(
                os.path.join(file_dir, MAIN_LOG_FILE),
                when="M",
                interval=max(rotation_min, 1),
                backupCount=max_backups,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(JsonFormatter())
        handler.addFilter(RequestIdFilter(server_name))
        handler._eventgate = True
        root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers = list(handlers)
        logger.setLevel(lvl)
        logger.propagate = False
