import logging
import os

from scenevault.logger import get_logger, init_logging, redact, register_secret
import scenevault.logger.state as state


def _flush():
    for h in logging.getLogger().handlers:
        h.flush()


def test_logger_creates_command_log(tmp_path, monkeypatch):
    monkeypatch.setenv("SCENEVAULT_COMMAND", "playlists")

    init_logging()
    get_logger("test").info("hello")
    _flush()

    logs = list(tmp_path.rglob("*.log"))
    assert len(logs) == 1
    assert "playlists" in logs[0].parts
    assert logs[0].name.startswith("playlists-")
    assert "hello" in logs[0].read_text(encoding="utf-8")


def test_init_logging_is_idempotent(monkeypatch):
    monkeypatch.setenv("SCENEVAULT_COMMAND", "scenes")

    init_logging()
    handlers = list(logging.getLogger().handlers)
    init_logging()

    assert logging.getLogger().handlers == handlers
    assert state.INITIALIZED is True


def test_new_command_repoints_file_handler(tmp_path, monkeypatch):
    monkeypatch.setenv("SCENEVAULT_COMMAND", "scenes")
    init_logging()
    first = state.LOG_FILE_PATH

    monkeypatch.setenv("SCENEVAULT_COMMAND", "check")
    init_logging()

    file_handlers = [
        h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
    assert state.LOG_FILE_PATH != first
    assert "check" in state.LOG_FILE_PATH.parts


def test_quiet_mode_has_no_console_handler(monkeypatch):
    monkeypatch.setenv("SCENEVAULT_QUIET", "1")

    init_logging()

    assert all(
        isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers
    )


def test_verbose_sets_debug_level(monkeypatch):
    monkeypatch.setenv("SCENEVAULT_VERBOSE", "1")

    init_logging()

    assert logging.getLogger().level == logging.DEBUG


def test_registered_secret_is_masked_in_file(tmp_path, monkeypatch):
    monkeypatch.setenv("SCENEVAULT_COMMAND", "settings")
    secret = "AIzaSyVerySecretKey123"

    init_logging()
    register_secret(secret)
    get_logger("test").info("using key %s", secret)
    _flush()

    text = state.LOG_FILE_PATH.read_text(encoding="utf-8")
    assert secret not in text
    assert "AIza***" in text


def test_short_values_are_not_registered():
    register_secret("abc")
    register_secret(None)

    assert state.SECRETS == set()


def test_file_only_records_skip_console(capsys, monkeypatch):
    monkeypatch.setenv("SCENEVAULT_COMMAND", "scenes")

    init_logging()
    get_logger("test").error("only-in-file", extra={"file_only": True})
    get_logger("test").warning("on-console")
    _flush()

    out = capsys.readouterr().out
    assert "on-console" in out
    assert "only-in-file" not in out
    assert "only-in-file" in state.LOG_FILE_PATH.read_text(encoding="utf-8")


def test_redact_preview():
    assert redact(None) == "(unset)"
    assert redact("short") == "***"
    assert redact("AIzaSyVerySecretKey123") == "AIza...y123"


def test_run_id_is_stable_within_process(monkeypatch):
    monkeypatch.setenv("SCENEVAULT_RUN_ID", "2026-01-01_00-00-00")

    init_logging()

    assert state.RUN_ID == "2026-01-01_00-00-00"
    assert state.LOG_FILE_PATH.name.endswith("2026-01-01_00-00-00.log")
    assert os.environ["SCENEVAULT_RUN_ID"] == "2026-01-01_00-00-00"
