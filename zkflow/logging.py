"""
zkflow.logging
--------------

Logging setup for the CLI and library:

- JSON lines or concise (optionally colored) text
- A per-run ``run_id`` carried via ``contextvars`` so every line emitted while
  a workflow runs can be correlated
- stdlib only; handlers always write to **stderr** so that stdout carries
  nothing but the interactive prompts and results

Usage
-----
    from zkflow import logging as zlog

    zlog.configure(level="INFO")       # once at process start
    log = zlog.get_logger(__name__)

    with zlog.run_scope():
        log.info("proving", extra={"circuit": "private_multiplication"})

Environment
-----------
    ZKFLOW_LOG_LEVEL=DEBUG|INFO|WARNING|ERROR   (default WARNING)
    ZKFLOW_LOG_FORMAT=json|text                 (default text)
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import os
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("_ZKFLOW_LOG_CONTEXT", default={})

_HANDLER_NAME = "zkflow-console"

# LogRecord attributes that are not user-supplied extras.
_RESERVED = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    )
)


def context() -> Dict[str, Any]:
    """Return a *copy* of the active logging context."""
    return dict(_LOG_CONTEXT.get())


def bind(**fields: Any) -> None:
    cur = dict(_LOG_CONTEXT.get())
    cur.update({k: _coerce_value(v) for k, v in fields.items()})
    _LOG_CONTEXT.set(cur)


def short_uuid() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def run_scope(run_id: Optional[str] = None) -> Iterator[str]:
    """Bind a run_id for the duration of the scope; restores prior context on exit."""
    prev = dict(_LOG_CONTEXT.get())
    rid = run_id or short_uuid()
    try:
        bind(run_id=rid)
        yield rid
    finally:
        _LOG_CONTEXT.set(prev)


def _utcnow_iso() -> str:
    return _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")


def _coerce_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray)):
        return v.hex()
    if isinstance(v, Path):
        return str(v)
    return str(v)


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _coerce_value(v)
        for k, v in record.__dict__.items()
        if not k.startswith("_") and k not in _RESERVED
    }


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utcnow_iso(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(context())
        for k, v in _extras(record).items():
            payload.setdefault(k, v)
        if record.exc_info:
            payload["err"] = "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return json.dumps(payload, separators=(",", ":"), default=str)


class TextFormatter(logging.Formatter):
    """
    One-liner:
      2026-01-05T12:34:56.789+00:00 | INFO  | zkflow.workflow | run_id=ab12cd34ef56 | proof generated
    """

    _COLORS = {
        logging.DEBUG: "\x1b[90m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[1m\x1b[35m",
    }

    def __init__(self, stream: io.TextIOBase):
        super().__init__()
        self._color = _supports_color(stream)

    def format(self, record: logging.LogRecord) -> str:
        lvl = f"{record.levelname:<5}"
        if self._color:
            lvl = f"{self._COLORS.get(record.levelno, '')}{lvl}\x1b[0m"
        fields = {**context(), **_extras(record)}
        line = f"{_utcnow_iso()} | {lvl} | {record.name}"
        if fields:
            line += " | " + " ".join(f"{k}={v}" for k, v in fields.items())
        line += f" | {record.getMessage()}"
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info)).rstrip()
        return line


def _supports_color(stream: Any) -> bool:
    try:
        return stream.isatty() and os.environ.get("NO_COLOR") is None
    except Exception:
        return False


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.WARNING


def configure(
    *,
    level: str | int | None = None,
    json_lines: Optional[bool] = None,
    stream: Optional[io.TextIOBase] = None,
) -> None:
    """
    Configure the ``zkflow`` logger hierarchy (idempotent).

    Only the package logger is touched so that embedding applications keep
    control of the root logger.
    """
    if level is None:
        level = os.environ.get("ZKFLOW_LOG_LEVEL", "WARNING")
    if json_lines is None:
        json_lines = os.environ.get("ZKFLOW_LOG_FORMAT", "text").strip().lower() == "json"
    stream = stream or sys.stderr

    logger = logging.getLogger("zkflow")
    logger.setLevel(_coerce_level(level))
    logger.propagate = False
    for h in list(logger.handlers):
        if h.get_name() == _HANDLER_NAME:
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if json_lines else TextFormatter(stream))
    logger.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "zkflow")


__all__ = [
    "configure",
    "get_logger",
    "bind",
    "context",
    "run_scope",
    "JSONFormatter",
    "TextFormatter",
]
