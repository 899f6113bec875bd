"""Tests for heater_link.effect_sink -- effect consumers."""

from __future__ import annotations

import pytest
import structlog
from structlog.testing import capture_logs

from heater_link import effect_sink
from heater_link.effect_sink import LoggingSink, RecordingSink
from heater_link.effects import DisplayRow, FatalDisconnect, PersistRow


@pytest.fixture()
def logs(monkeypatch: pytest.MonkeyPatch):
    with capture_logs() as captured:
        monkeypatch.setattr(effect_sink, "logger", structlog.get_logger())
        yield captured


class TestLoggingSink:
    def test_display_row_fields_logged_as_dict(self, logs: list) -> None:
        LoggingSink().handle(DisplayRow(fields={"time": 3.0}, rank="Learner"))
        assert logs == [
            {
                "event": "display_row",
                "log_level": "info",
                "fields": {"time": 3.0},
                "rank": "Learner",
            }
        ]
        assert type(logs[0]["fields"]) is dict

    def test_fatal_disconnect_is_error(self, logs: list) -> None:
        LoggingSink().handle(FatalDisconnect())
        assert logs[0]["log_level"] == "error"
        assert "restart" in logs[0]["message"]

    def test_persist_row_is_debug(self, logs: list) -> None:
        LoggingSink().handle(PersistRow(("1.00",)))
        assert logs[0]["log_level"] == "debug"
        assert logs[0]["values"] == ("1.00",)


class TestRecordingSink:
    def test_keeps_order_and_filters_by_kind(self) -> None:
        sink = RecordingSink()
        sink.handle(PersistRow(("1.00",)))
        sink.handle(FatalDisconnect())
        assert sink.kinds() == ["persist_row", "fatal_disconnect"]
        assert sink.of_kind("fatal_disconnect") == [FatalDisconnect()]
