from __future__ import annotations

from pathlib import Path
from typing import Iterator, List

import pytest

from doc_engine import TextDocument
from doc_engine.runtime import telemetry


@pytest.fixture
def captured() -> Iterator[List[str]]:
    messages: List[str] = []
    telemetry.configure(sink=messages.append, level="DEBUG")
    yield messages
    telemetry.configure(enabled=False)


def test_record_event_reaches_sink(captured: List[str]) -> None:
    telemetry.record_event("custom.event", data={"answer": 42})

    assert any("event::custom.event" in line and "42" in line for line in captured)


def test_rejected_command_is_recorded(captured: List[str]) -> None:
    document = TextDocument(["abc"], name="t.txt")

    document.delete(4, 1, 1)

    assert any("command.rejected" in line and "out_of_range" in line for line in captured)
    assert any("span::end" in line and "text::delete" in line for line in captured)


def test_span_reports_failure_and_reraises(captured: List[str]) -> None:
    with pytest.raises(RuntimeError):
        with telemetry.span("work", component=True, metadata={"k": "v"}) as handle:
            handle.add_metadata("step", 1)
            raise RuntimeError("boom")

    assert any("span::fail" in line and "boom" in line for line in captured)
    assert handle.elapsed_ms is not None


def test_disabled_by_default_emits_nothing() -> None:
    messages: List[str] = []
    telemetry.configure(sink=messages.append, enabled=False)

    telemetry.record_event("quiet")

    assert messages == []
    telemetry.configure(enabled=False)


def test_unknown_level_and_preset_raise() -> None:
    with pytest.raises(ValueError):
        telemetry.record_event("x", level="loud")
    with pytest.raises(ValueError):
        telemetry.configure(preset="unknown")


def test_sink_configuration_keeps_console_quiet(
    captured: List[str], capfd: pytest.CaptureFixture[str]
) -> None:
    TextDocument(["abc"], name="t.txt").delete(4, 1, 1)

    assert any("command.rejected" in line for line in captured)
    assert "command.rejected" not in capfd.readouterr().err


def test_production_preset_logs_to_file_only(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capfd: pytest.CaptureFixture[str],
) -> None:
    log_file = tmp_path / "engine.log"
    monkeypatch.setenv("DOC_ENGINE_LOG_FILE", str(log_file))

    telemetry.configure(preset="production")
    telemetry.record_event("prod.event", data={"n": 1})
    telemetry.configure(enabled=False)

    captured_output = capfd.readouterr()
    assert "prod.event" not in captured_output.err
    assert "prod.event" not in captured_output.out
    assert "prod.event" in log_file.read_text()
