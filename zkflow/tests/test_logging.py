from __future__ import annotations

import io
import json
import logging

from zkflow import logging as zlog


def test_json_lines_carry_run_id_and_extras():
    buf = io.StringIO()
    zlog.configure(level="DEBUG", json_lines=True, stream=buf)
    log = zlog.get_logger("zkflow.test")
    with zlog.run_scope("abc123") as rid:
        log.info("proof generation failed", extra={"code": "PROVER_REJECTED"})
    log.info("outside")

    first, second = (json.loads(line) for line in buf.getvalue().splitlines())
    assert rid == "abc123"
    assert first["run_id"] == "abc123"
    assert first["code"] == "PROVER_REJECTED"
    assert first["level"] == "INFO"
    assert first["logger"] == "zkflow.test"
    assert "run_id" not in second


def test_text_format_and_idempotent_configure():
    buf = io.StringIO()
    zlog.configure(level="INFO", json_lines=False, stream=buf)
    zlog.configure(level="INFO", json_lines=False, stream=buf)
    logger = logging.getLogger("zkflow")
    assert len([h for h in logger.handlers if h.get_name() == "zkflow-console"]) == 1
    assert logger.propagate is False

    zlog.get_logger("zkflow.workflow").debug("hidden")
    zlog.get_logger("zkflow.workflow").warning("shown", extra={"dir": "/tmp/x"})
    out = buf.getvalue()
    assert "hidden" not in out
    assert "| WARNING | zkflow.workflow | dir=/tmp/x | shown" in out


def test_env_selects_level_and_format(monkeypatch):
    monkeypatch.setenv("ZKFLOW_LOG_LEVEL", "error")
    monkeypatch.setenv("ZKFLOW_LOG_FORMAT", "json")
    buf = io.StringIO()
    zlog.configure(stream=buf)
    zlog.get_logger("zkflow.x").warning("dropped")
    zlog.get_logger("zkflow.x").error("kept")
    (line,) = buf.getvalue().splitlines()
    assert json.loads(line)["msg"] == "kept"


def test_bind_and_context_copy():
    with zlog.run_scope():
        zlog.bind(circuit="private_multiplication")
        ctx = zlog.context()
        ctx["circuit"] = "mutated"
        assert zlog.context()["circuit"] == "private_multiplication"
    assert "circuit" not in zlog.context()
