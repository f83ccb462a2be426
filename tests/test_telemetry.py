from __future__ import annotations

from telemetry.logger import TelemetryLogger, read_records


def test_logger_appends_jsonl(tmp_path) -> None:
    path = str(tmp_path / "nested" / "log.jsonl")
    logger = TelemetryLogger(path)
    logger.log_step({"tick": 1, "grid": {"coverage": 0.25}})
    logger.log_step({"tick": 2, "grid": {"coverage": 0.5}})
    logger.close()
    assert logger.closed

    # Writes after close are ignored
    logger.log_step({"tick": 3})

    with open(path, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()
    assert lines[0] == '{"tick":1,"grid":{"coverage":0.25}}'
    assert len(lines) == 2


def test_read_records_skips_partial_lines(tmp_path) -> None:
    path = tmp_path / "log.jsonl"
    path.write_text('{"tick":1}\n\n{"tick":\n{"tick":2}\n', encoding="utf-8")
    assert read_records(str(path)) == [{"tick": 1}, {"tick": 2}]
    assert read_records(str(tmp_path / "missing.jsonl")) == []
