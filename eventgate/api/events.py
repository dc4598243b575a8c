from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Request

from eventgate.api.deps import TokenAuthDep
from eventgate.core import metrics
from eventgate.core.errors import AppHTTPException, EventLogError, InvalidFactError
from eventgate.schemas.events import EventAccepted

"""
API Events (ingestion server-to-server).

Rôle (fonctionnel) :
- Reçoit un fact JSON (protégé par token).
- Le prépare (ApiPreprocessor : source, IP, geo, user-agent).
- L’écrit dans le journal des events et met à jour les compteurs Prometheus.

Erreurs :
- Corps absent / null : 400 INVALID_FACT (event compté comme “skip”).
- Écriture aval en échec : 500 EVENT_LOG_ERROR (event compté comme “error”).
"""

router = APIRouter(prefix="/api/v1", tags=["events"])
log = logging.getLogger("eventgate.api.events")


@router.post("/event", response_model=EventAccepted, dependencies=[TokenAuthDep])
def consume_event(request: Request, fact: Optional[Dict[str, Any]] = Body(None)):
    preprocessor = request.app.state.preprocessor
    event_log = request.app.state.event_log

    try:
        fact = preprocessor.preprocess(fact, request)
    except InvalidFactError as exc:
        metrics.skip_events(event_log.name)
        raise AppHTTPException(400, "INVALID_FACT", str(exc)) from exc

    try:
        event_log.consume(fact)
    except EventLogError as exc:
        log.error("Error writing event: %s", exc)
        metrics.error_events(event_log.name)
        raise AppHTTPException(500, "EVENT_LOG_ERROR", "Impossible d’écrire l’event") from exc

    metrics.success_events(event_log.name)
    return EventAccepted()
