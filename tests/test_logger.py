import json
import logging

from hkpstore.logger import get_logger


def test_logger_writes_json_lines_to_file(tmp_path):
    path = tmp_path / "logs" / "hkpstore.log"
    log = get_logger("hkpstore.test.file", to_file=str(path))
    log.info("[INSERT] fingerprint=abc")
    for h in log.handlers:
        h.flush()

    line = json.loads(path.read_text().splitlines()[-1])
    assert line["level"] == "INFO"
    assert line["name"] == "hkpstore.test.file"
    assert line["msg"] == "[INSERT] fingerprint=abc"
    assert line["ts"].endswith("Z")


def test_logger_level_from_env(monkeypatch):
    monkeypatch.setenv("HKPSTORE_LOG_LEVEL", "debug")
    assert get_logger("hkpstore.test.env").level == logging.DEBUG

    monkeypatch.setenv("HKPSTORE_LOG_LEVEL", "nonsense")
    assert get_logger("hkpstore.test.env_bad").level == logging.INFO


def test_logger_handlers_attached_once():
    a = get_logger("hkpstore.test.once")
    b = get_logger("hkpstore.test.once")
    assert a is b
    assert len(b.handlers) == 1
