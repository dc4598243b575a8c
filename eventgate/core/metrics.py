from __future__ import annotations

import logging

from prometheus_client import Counter, make_asgi_app

"""
Core Metrics (Prometheus).

Rôle (fonctionnel) :
- Compte les events acceptés / en erreur / ignorés, par projet et destination.
- Expose l’app ASGI Prometheus (montée sur /prometheus quand metrics.enabled).

Notes :
- Les compteurs sont enregistrés une seule fois (registry Prometheus global) ;
  init() ne fait que basculer le comptage.
- Les destinations sont nommées "<projet>.<destination>" ; sans projet, le label vaut "-".
"""

log = logging.getLogger("eventgate.metrics")

enabled = False

_LABELS = ["project_id", "destination_id"]

events_success = Counter("eventgate_events_success", "Events written downstream", _LABELS)
events_errors = Counter("eventgate_events_errors", "Events failed downstream", _LABELS)
events_skip = Counter("eventgate_events_skip", "Events skipped", _LABELS)


def init(is_enabled: bool) -> None:
    global enabled
    enabled = is_enabled
    if enabled:
        log.info("Initializing Prometheus metrics..")
    else:
        log.warning("Metrics isn't enabled")


def extract_labels(destination_name: str) -> tuple[str, str]:
    parts = destination_name.split(".")
    if len(parts) > 1:
        return parts[0], parts[1]
    return "-", destination_name


def _inc(counter: Counter, destination_name: str, value: int) -> None:
    if not enabled:
        return
    project_id, destination_id = extract_labels(destination_name)
    counter.labels(project_id=project_id, destination_id=destination_id).inc(value)


def success_events(destination_name: str, value: int = 1) -> None:
    _inc(events_success, destination_name, value)


def error_events(destination_name: str, value: int = 1) -> None:
    _inc(events_errors, destination_name, value)


def skip_events(destination_name: str, value: int = 1) -> None:
    _inc(events_skip, destination_name, value)


def metrics_app():
    return make_asgi_app()
