from __future__ import annotations

import json
import logging

import pytest

from eventgate.core.errors import EventLogError
from eventgate.core.settings import EventLogSettings
from eventgate.services.event_log import EVENTS_FILE, EventLog


def test_file_event_log_writes_json_lines(tmp_path):
    event_log = EventLog.from_settings(EventLogSettings(path=str(tmp_path / "events")))
    event_log.consume({"event": "click", "src": "api"})
    event_log.consume({"event": "view", "label": "été"})
    event_log.close()

    lines = (tmp_path / "events" / EVENTS_FILE).read_text(encoding="utf-8").splitlines()
    assert [json.loads(line) for line in lines] == [
        {"event": "click", "src": "api"},
        {"event": "view", "label": "été"},
    ]


def test_stdout_event_log(capsys):
    event_log = EventLog.from_settings(EventLogSettings(type="stdout"))
    event_log.consume({"event": "click"})
    event_log.close()

    assert json.loads(capsys.readouterr().out.strip()) == {"event": "click"}


def test_show_in_server_copies_to_server_logs(tmp_path, caplog):
    event_log = EventLog.from_settings(EventLogSettings(path=str(tmp_path), show_in_server=True))
    with caplog.at_level(logging.INFO, logger="eventgate.events"):
        event_log.consume({"event": "click"})
    event_log.close()

    assert '"event": "click"' in caplog.text


def test_unknown_type_is_rejected(tmp_path):
    with pytest.raises(EventLogError):
        EventLog.from_settings(EventLogSettings(path=str(tmp_path), type="kafka"))


def test_unusable_path_is_rejected(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    with pytest.raises(EventLogError):
        EventLog.from_settings(EventLogSettings(path=str(blocker)))


class FullDiskHandler(logging.Handler):
    def emit(self, record):
        raise OSError("No space left on device")


def test_write_failure_raises_event_log_error():
    event_log = EventLog(FullDiskHandler())
    with pytest.raises(EventLogError, match="No space left on device"):
        event_log.consume({"event": "click"})


def test_write_to_closed_stream_raises_event_log_error(tmp_path):
    event_log = EventLog.from_settings(EventLogSettings(path=str(tmp_path)))
    event_log._handler.stream.close()

    with pytest.raises(EventLogError):
        event_log.consume({"event": "click"})

    event_log._handler.stream = None
    event_log.close()
