# cdnredirect/core/logger.py
from __future__ import annotations

"""
CDN Redirect • Logging (Loguru)
-------------------------------
- Pretty console logs by default; optional JSON logs via `LOG_JSON=1`
- Intercepts stdlib logs (uvicorn, fastapi, cdnredirect.*) into Loguru
- Optional file sink with rotation

Importing this module installs the sinks; `configure_logging()` re-applies
them after env changes.

Env
---
LOG_LEVEL=INFO|DEBUG|WARNING|ERROR (default: INFO)
LOG_JSON=1 (enable JSON logs; pretty logs otherwise)
LOG_TO_FILE=1 (write to LOG_DIR/LOG_FILE with rotation; default: 0)
LOG_DIR=logs
LOG_FILE=app.log
LOG_ROTATION=10 MB
APP_DEBUG=1 (enables backtrace/diagnose in console sink)
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "fastapi", "cdnredirect")


def _truthy(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


# ─────────────────────────────────────────────────────────────
# 🧾 Formatters
# ─────────────────────────────────────────────────────────────
def _fmt_pretty(record):
    """Colorized single-line formatter."""
    safe_name = (record["name"] or "").replace("<", "[").replace(">", "]")
    safe_func = record["function"].replace("<", "[").replace(">", "]")
    return (
        f"<green>{record['time']:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        f"<level>{record['level']:<8}</level> | "
        f"<cyan>{safe_name}</cyan>:<cyan>{safe_func}</cyan>:<cyan>{record['line']}</cyan> - "
        "<level>{message}</level>\n{exception}"
    )


def _fmt_json(record):
    """Structured JSON logs, safe for ingestion."""
    payload: Dict[str, Any] = {
        "ts": record["time"].timestamp(),
        "time": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f%z"),
        "level": record["level"].name,
        "logger": record["name"],
        "func": record["function"],
        "line": record["line"],
        "message": record["message"],
    }
    for k, v in record["extra"].items():
        if k not in payload:
            payload[k] = v
    record["extra"]["_json"] = json.dumps(payload, ensure_ascii=False, default=str)
    return "{extra[_json]}\n"


# ─────────────────────────────────────────────────────────────
# 🔁 Intercept stdlib logging → Loguru
# ─────────────────────────────────────────────────────────────
class InterceptHandler(logging.Handler):
    """Route standard logging records into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


# ─────────────────────────────────────────────────────────────
# 📤 Sinks
# ─────────────────────────────────────────────────────────────
def configure_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    as_json = _truthy("LOG_JSON", "0")
    app_debug = _truthy("APP_DEBUG", "0")
    fmt = _fmt_json if as_json else _fmt_pretty

    logger.remove()
    logger.add(
        sys.stdout,
        level=level,
        format=fmt,
        enqueue=True,
        backtrace=app_debug,
        diagnose=app_debug,
    )

    if _truthy("LOG_TO_FILE", "0"):
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_dir / os.getenv("LOG_FILE", "app.log")),
            rotation=os.getenv("LOG_ROTATION", "10 MB"),
            level=level,
            format=fmt,
            enqueue=True,
            backtrace=False,
            diagnose=False,
        )

    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(level)
        std_logger.propagate = False


configure_logging()

__all__ = ["InterceptHandler", "configure_logging", "logger"]
