from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from eventgate.core import metrics


def _sample(name: str, project_id: str, destination_id: str) -> float:
    value = REGISTRY.get_sample_value(name, {"project_id": project_id, "destination_id": destination_id})
    return value or 0.0


@pytest.fixture(autouse=True)
def restore_enabled(monkeypatch):
    monkeypatch.setattr(metrics, "enabled", metrics.enabled)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("proj1.dest1", ("proj1", "dest1")),
        ("events", ("-", "events")),
        ("a.b.c", ("a", "b")),
    ],
)
def test_extract_labels(name, expected):
    assert metrics.extract_labels(name) == expected


def test_counters_increment_when_enabled():
    metrics.init(True)
    before = _sample("eventgate_events_success_total", "proj1", "dest1")
    errors_before = _sample("eventgate_events_errors_total", "proj1", "dest1")

    metrics.success_events("proj1.dest1")
    metrics.success_events("proj1.dest1", 2)
    metrics.error_events("proj1.dest1")

    assert _sample("eventgate_events_success_total", "proj1", "dest1") == before + 3
    assert _sample("eventgate_events_errors_total", "proj1", "dest1") == errors_before + 1


def test_counters_ignored_when_disabled(caplog):
    metrics.init(False)
    before = _sample("eventgate_events_skip_total", "-", "disabled")

    metrics.skip_events("disabled")

    assert _sample("eventgate_events_skip_total", "-", "disabled") == before
    assert "Metrics isn't enabled" in caplog.text
