"""Logging for the jobhunt package (stdlib only).

Handlers hang off the ``jobhunt`` logger rather than the root logger, so
Streamlit's own root configuration is left alone and script reruns do not
stack duplicate handlers.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import date
from pathlib import Path

PACKAGE = "jobhunt"
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"


def _log_dir() -> Path:
    override = os.environ.get("LOG_DIR", "").strip()
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "logs"


def get_logger(name: str) -> logging.Logger:
    """Named logger under ``jobhunt``; the package logger is set up once."""
    _configure(logging.getLogger(PACKAGE))
    if name != PACKAGE and not name.startswith(PACKAGE + "."):
        name = f"{PACKAGE}.{name}"
    return logging.getLogger(name)


def _configure(pkg: logging.Logger) -> None:
    if pkg.handlers:
        return

    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    pkg.setLevel(logging.DEBUG)
    pkg.propagate = False
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    pkg.addHandler(console)

    try:
        log_dir = _log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / f"jobhunt_{date.today():%Y-%m-%d}.log", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        pkg.addHandler(fh)
    except OSError:
        # Read-only deployments still get console output.
        pass
