import json
import logging
import threading
import time
from datetime import datetime

import pytest

from cdckit import logger


def _record(level, msg):
    return logging.LogRecord("cdckit", level, __file__, 1, msg, None, None)


def test_console_formatter_info_level_color():
    text = logger.ConsoleFormatter().format(_record(logging.INFO, "hello"))
    assert "\033[32mINFO\033[0m" in text
    assert text.endswith(" hello")


def test_console_formatter_error_message_red():
    text = logger.ConsoleFormatter().format(_record(logging.ERROR, "boom"))
    assert "\033[31mERROR\033[0m" in text
    assert text.endswith("\033[31mboom\033[0m")


def test_console_formatter_warn_not_red_message():
    text = logger.ConsoleFormatter().format(_record(logging.WARNING, "careful"))
    assert "\033[33mWARN\033[0m" in text
    assert text.endswith(" careful")


def test_console_formatter_non_string_as_json():
    text = logger.ConsoleFormatter().format(_record(logging.INFO, {"a": 1}))
    assert text.endswith('{"a":1}')


def test_console_formatter_timestamp_gray():
    text = logger.ConsoleFormatter().format(_record(logging.DEBUG, "x"))
    prefix = "\033[90m"
    assert text.startswith(prefix)
    stamp = text[len(prefix):len(prefix) + 19]
    parsed = datetime.strptime(stamp, "%Y-%m-%d %H:%M:%S")
    assert parsed.strftime("%Y-%m-%d %H:%M:%S") == stamp
    assert text[len(prefix) + 19:len(prefix) + 24] == "\033[0m "
    assert "\033[36mDEBUG\033[0m" in text
    assert text.endswith(" x")


def test_file_logger_round_trip(tmp_path):
    content = {"b": [1, 2], "a": "text"}
    path = logger.file_logger(content, "stats", ".json", str(tmp_path))
    assert path == tmp_path / "stats.json"
    assert json.loads(path.read_text()) == content


def test_file_logger_overwrites(tmp_path):
    logger.file_logger({"n": 1}, "state", ".json", str(tmp_path))
    logger.file_logger({"n": 2}, "state", ".json", str(tmp_path))
    assert json.loads((tmp_path / "state.json").read_text()) == {"n": 2}


def test_file_logger_without_folder(monkeypatch):
    logger.configure(None)
    monkeypatch.delenv("CONFIG_FOLDER", raising=False)
    with pytest.raises(ValueError, match="config folder is not set"):
        logger.file_logger({}, "stats", ".json")


def test_file_logger_uses_env(monkeypatch, tmp_path):
    logger.configure(None)
    monkeypatch.setenv("CONFIG_FOLDER", str(tmp_path))
    path = logger.file_logger([1], "list", ".json")
    assert path == tmp_path / "list.json"
    assert json.loads(path.read_text()) == [1]


def test_file_logger_unserialisable(tmp_path):
    with pytest.raises(ValueError, match="failed to marshal content"):
        logger.file_logger({"x": object()}, "bad", ".json", str(tmp_path))


def test_format_stats_values():
    stats = logger.format_stats(100, 2, 300, 10.0, 5 * 1024 * 1024)
    assert stats["Running Threads"] == 2
    assert stats["Synced Records"] == 100
    assert stats["Memory"] == "5 mb"
    assert stats["Speed"] == "10.00 rps"
    assert stats["Estimated Remaining Time"] == "20.00 s"


def test_format_stats_not_determined_without_progress():
    stats = logger.format_stats(0, 1, 50, 3.0, 0)
    assert stats["Estimated Remaining Time"] == "Not Determined"


def test_format_stats_not_determined_when_overshot():
    stats = logger.format_stats(60, 1, 50, 3.0, 0)
    assert stats["Estimated Remaining Time"] == "Not Determined"


def test_stats_logger_writes_file(tmp_path):
    logger.configure(None)
    stop = threading.Event()
    thread = logger.stats_logger(stop, lambda: (5, 1, 10), str(tmp_path), interval=0.01)
    target = tmp_path / "stats.json"
    deadline = time.monotonic() + 5
    while not target.exists() and time.monotonic() < deadline:
        time.sleep(0.01)
    stop.set()
    thread.join(5)
    data = json.loads(target.read_text())
    assert data["Synced Records"] == 5
    assert data["Running Threads"] == 1
    assert not thread.is_alive()


def test_classify_stack_trace_sequence():
    reader = logger.ProcessOutputReader("proc", source=iter([]))
    results = [
        reader.classify(line)
        for line in [
            "starting up",
            "Exception in thread main java.lang.RuntimeException",
            "    at com.example.Foo.bar(Foo.java:10)",
            "plain output",
        ]
    ]
    assert results == [False, True, True, False]


def test_classify_error_reader_flags_everything():
    reader = logger.ProcessOutputReader("proc", is_error=True, source=iter([]))
    assert reader.classify("just text") is True


def test_start_reading_logs_lines(tmp_path, capsys):
    logger.configure(str(tmp_path))
    reader = logger.ProcessOutputReader("proc")
    reader.writer.write(b"hello there\nFailed to connect\n")
    reader.writer.close()
    thread = reader.start_reading()
    thread.join(5)
    out = capsys.readouterr().out
    assert "[proc] hello there" in out
    assert "\033[31mERROR\033[0m" in out
    assert reader.closed is True
    log_files = list((tmp_path / "logs").glob("sync_*/cdckit.log"))
    assert len(log_files) == 1
    entries = [json.loads(line) for line in log_files[0].read_text().splitlines()]
    assert [entry["level"] for entry in entries] == ["info", "error"]
    assert entries[0]["message"] == "[proc] hello there"


def test_close_is_idempotent():
    reader = logger.ProcessOutputReader("proc")
    reader.writer.close()
    reader.close()
    reader.close()
    assert reader.closed is True


def test_info_single_object_as_json(capsys):
    logger.configure(None)
    logger.info({"k": "v"})
    assert '{"k":"v"}' in capsys.readouterr().out


def test_fatal_exits(capsys):
    logger.configure(None)
    with pytest.raises(SystemExit) as excinfo:
        logger.fatal("stop ", "now")
    assert excinfo.value.code == 1
    assert "stop now" in capsys.readouterr().out