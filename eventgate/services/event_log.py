from __future__ import annotations

import json
import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler

from eventgate.core.errors import EventLogError
from eventgate.core.settings import EventLogSettings
from eventgate.services.facts import Fact

"""
Event Log (sink aval).

Rôle (fonctionnel) :
- Écrit chaque fact enrichi sous forme d’une ligne JSON.
- Deux modes (log.type) :
  - file : <log.path>/events.log, rotation toutes les log.rotation_min minutes
  - stdout : sortie standard
- log.show_in_server : recopie chaque fact dans les logs serveur (debug).

Notes :
- Les lignes passent directement par le handler (pas de logger) : les logs serveur JSON
  ne sont pas mélangés aux events.
- Une écriture en échec (disque plein, flux fermé) lève EventLogError ; le handler
  ne l’avale pas.
- close() est appelé par AppConfig.close() (enregistré via schedule_closing).
"""

log = logging.getLogger("eventgate.events")

EVENTS_FILE = "events.log"


class _RaiseOnError:
    """Remonte l’erreur d’écriture au lieu de l’imprimer sur stderr."""

    def handleError(self, record: logging.LogRecord) -> None:
        exc = sys.exc_info()[1]
        if exc is not None:
            raise exc


class EventFileHandler(_RaiseOnError, TimedRotatingFileHandler):
    pass


class EventStreamHandler(_RaiseOnError, logging.StreamHandler):
    pass


class EventLog:
    """Journal des events (1 fact = 1 ligne JSON)."""

    def __init__(self, handler: logging.Handler, *, name: str = "events", show_in_server: bool = False) -> None:
        self.name = name
        self.show_in_server = show_in_server
        self._handler = handler
        self._handler.setFormatter(logging.Formatter("%(message)s"))

    @classmethod
    def from_settings(cls, settings: EventLogSettings, *, name: str = "events") -> "EventLog":
        kind = settings.type.lower()
        if kind == "stdout":
            return cls(EventStreamHandler(sys.stdout), name=name, show_in_server=settings.show_in_server)
        if kind != "file":
            raise EventLogError(f"log.type inconnu: {settings.type!r}")

        try:
            os.makedirs(settings.path, exist_ok=True)
            handler = EventFileHandler(
                os.path.join(settings.path, EVENTS_FILE),
                when="M",
                interval=max(settings.rotation_min, 1),
                encoding="utf-8",
            )
        except OSError as exc:
            raise EventLogError(f"Impossible d’ouvrir le journal des events {settings.path}: {exc}") from exc
        return cls(handler, name=name, show_in_server=settings.show_in_server)

    def consume(self, fact: Fact) -> None:
        """Écrit le fact ; lève EventLogError si l’écriture échoue."""
        line = json.dumps(fact, ensure_ascii=False, default=str)
        record = logging.LogRecord(f"eventgate.eventlog.{self.name}", logging.INFO, __file__, 0, line, None, None)
        try:
            self._handler.handle(record)
        except (OSError, ValueError) as exc:
            raise EventLogError(f"Écriture impossible dans le journal {self.name}: {exc}") from exc

        if self.show_in_server:
            log.info(line)

    def close(self) -> None:
        self._handler.close()
