import re
import sys

from loguru import logger

from gifconverter.services.logging_service import install_exception_hooks, new_trace_id, setup_logging


def test_trace_ids_are_short_and_random():
    ids = {new_trace_id() for _ in range(50)}
    assert len(ids) > 1
    assert all(re.fullmatch(r"[0-9a-f]{5}", trace) for trace in ids)


def test_log_file_is_appended(tmp_path, restore_logger):
    log_file = tmp_path / "logs" / "log.txt"
    log_file.parent.mkdir()
    log_file.write_text("[2024-01-01 00:00:00Z|?] earlier run\n", encoding="utf-8")

    setup_logging(log_file, "ERROR")
    with logger.contextualize(trace="ab12c"):
        logger.info("inside a file")
    logger.info("outside any file")
    logger.debug("not recorded")
    logger.remove()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "[2024-01-01 00:00:00Z|?] earlier run"
    assert lines[1].endswith("|ab12c] inside a file")
    assert lines[2].endswith("|?] outside any file")
    assert len(lines) == 3


def test_unhandled_exceptions_are_logged(tmp_path, restore_logger):
    log_file = tmp_path / "log.txt"
    setup_logging(log_file, "ERROR")
    install_exception_hooks()

    try:
        raise RuntimeError("escaped every boundary")
    except RuntimeError:
        sys.excepthook(*sys.exc_info())
    logger.remove()

    text = log_file.read_text(encoding="utf-8")
    assert "UnhandledException:" in text
    assert "RuntimeError: escaped every boundary" in text
