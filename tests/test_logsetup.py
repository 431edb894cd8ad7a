import gzip
import logging
import re
import time

import pytest

from golbat.logsetup import PlainFormatter, rotate_logs, setup_logger

LINE = re.compile(r"^(\w{4}) \d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} (.*)$")


@pytest.fixture
def reset_logger():
    yield
    logger = setup_logger(logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def make_record(level, msg, args=()):
    return logging.LogRecord("golbat", level, __file__, 1, msg, args, None)


@pytest.mark.parametrize(
    "level, desc",
    [
        (logging.DEBUG, "DEBG"),
        (logging.INFO, "INFO"),
        (logging.WARNING, "WARN"),
        (logging.ERROR, "ERRO"),
        (logging.CRITICAL, "FATL"),
    ],
)
def test_formatter_level_descriptions(level, desc):
    line = PlainFormatter().format(make_record(level, "hello %s", ("world",)))
    match = LINE.match(line)
    assert match is not None
    assert match.group(1) == desc
    assert match.group(2) == "hello world"


def test_formatter_custom_timestamp_format():
    formatter = PlainFormatter("%Y")
    record = make_record(logging.INFO, "msg")
    year = time.strftime("%Y", time.localtime(record.created))
    assert formatter.format(record) == f"INFO {year} msg"


def test_setup_logger_writes_to_stdout(capsys, reset_logger):
    logger = setup_logger(logging.INFO)
    logger.info("visible")
    logger.debug("hidden")
    out = capsys.readouterr().out
    assert "visible" in out
    assert "hidden" not in out


def test_file_logging_and_rotation(tmp_path, capsys, reset_logger):
    logger = setup_logger(logging.INFO, True, 1, 0, 0, False, tmp_path)
    logger.info("first line")
    log_file = tmp_path / "golbat.log"
    assert "first line" in log_file.read_text()
    rotate_logs()
    logger.info("second line")
    backups = sorted(p for p in tmp_path.iterdir() if p.name != "golbat.log")
    assert len(backups) == 1
    assert backups[0].name.startswith("golbat-")
    assert "first line" in backups[0].read_text()
    assert "second line" in log_file.read_text()
    assert "first line" not in log_file.read_text()


def test_rotation_compresses_backups(tmp_path, capsys, reset_logger):
    logger = setup_logger(logging.INFO, True, 1, 0, 0, True, tmp_path)
    logger.warning("to be compressed")
    rotate_logs()
    backups = [p for p in tmp_path.iterdir() if p.name.endswith(".gz")]
    assert len(backups) == 1
    with gzip.open(backups[0], "rt") as handle:
        assert "to be compressed" in handle.read()


def test_rotation_keeps_max_backups(tmp_path, capsys, reset_logger):
    logger = setup_logger(logging.INFO, True, 1, 0, 2, False, tmp_path)
    for index in range(4):
        logger.info("entry %d", index)
        rotate_logs()
    backups = sorted(p for p in tmp_path.iterdir() if p.name.startswith("golbat-"))
    assert len(backups) == 2
    assert "entry 3" in backups[-1].read_text()


def test_rotate_logs_without_file_logging_creates_nothing(tmp_path, capsys, reset_logger):
    setup_logger(logging.INFO, False, 1, 0, 0, False, tmp_path)
    rotate_logs()
    assert list(tmp_path.iterdir()) == []