"""
Logging setup for CaliDrone hosts.

Every record is stamped with the host ``service`` label and the package
``area`` it came from (``planner``, ``recording``, ``services``, ...), taken
from the logger name unless the call site passes one explicitly.

Env options (optional):
- CALIDRONE_LOG_LEVEL=DEBUG|INFO|WARNING|ERROR (default INFO)
- CALIDRONE_LOG_JSON=1 (JSON lines)
- CALIDRONE_LOG_FILE=/path/to/file.log (RotatingFileHandler)
- CALIDRONE_LOG_DIR=/path/to/dir (uses <service>.log when CALIDRONE_LOG_FILE unset)
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional


PACKAGE = "calidrone"
TEXT_FORMAT = '%(asctime)s %(levelname)s [%(service)s/%(area)s] %(name)s %(message)s'

_state = {'configured': False, 'service': PACKAGE}

_TRUTHY = ('1', 'true', 'yes', 'on')

__all__ = [
    "setup_logging",
    "get_logger",
    "reset_logging",
    "area_for",
]


def area_for(logger_name: str) -> str:
    """Package area of a logger name: ``calidrone.recording.session`` -> ``recording``."""
    parts = logger_name.split('.')
    if parts[0] != PACKAGE:
        return 'external'
    return parts[1] if len(parts) > 1 else PACKAGE


class _RecordContext(logging.Filter):
    """Fills in ``service`` and ``area`` on records that do not carry them."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, 'service', None):
            record.service = _state['service']
        if not getattr(record, 'area', None):
            record.area = getattr(record, 'component', None) or area_for(record.name)
        return True


class _LevelBand(logging.Filter):
    """Passes records with ``low <= levelno <= high``."""

    def __init__(self, low: int = logging.NOTSET, high: int = logging.CRITICAL):
        super().__init__()
        self.low = low
        self.high = high

    def filter(self, record: logging.LogRecord) -> bool:
        return self.low <= record.levelno <= self.high


class _JSONLines(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'ts': self.formatTime(record, datefmt='%Y-%m-%dT%H:%M:%S'),
            'level': record.levelname,
            'service': getattr(record, 'service', ''),
            'area': getattr(record, 'area', ''),
            'logger': record.name,
            'message': record.getMessage(),
        }
        if record.exc_info:
            payload['exc'] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv('CALIDRONE_LOG_LEVEL') or 'INFO').upper()
    return getattr(logging, name, logging.INFO)


def _wants_json(json_format: Optional[bool]) -> bool:
    if json_format is not None:
        return str(json_format).lower() in _TRUTHY
    return os.getenv('CALIDRONE_LOG_JSON', '').lower() in _TRUTHY


def _log_file_for(service: str) -> Optional[Path]:
    explicit = os.getenv('CALIDRONE_LOG_FILE')
    if explicit:
        return Path(explicit)
    log_dir = os.getenv('CALIDRONE_LOG_DIR')
    return Path(log_dir) / f'{service}.log' if log_dir else None


def _attach(root: logging.Logger, handler: logging.Handler, formatter: logging.Formatter,
            band: Optional[_LevelBand] = None) -> None:
    handler.setFormatter(formatter)
    handler.addFilter(_RecordContext())
    if band is not None:
        handler.addFilter(band)
    root.addHandler(handler)


def setup_logging(
    service: str = PACKAGE,
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure process logging once. Later calls are ignored.

    INFO and below go to stdout, WARNING and above to stderr, and an optional
    rotating file receives everything.
    """
    if _state['configured']:
        return

    _state['service'] = service
    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    formatter = _JSONLines() if _wants_json(json_format) else logging.Formatter(TEXT_FORMAT)

    _attach(root, logging.StreamHandler(stream=sys.stdout), formatter, _LevelBand(high=logging.INFO))
    _attach(root, logging.StreamHandler(stream=sys.stderr), formatter, _LevelBand(low=logging.WARNING))

    log_path = _log_file_for(service)
    if log_path is not None:
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.handlers.RotatingFileHandler(
                log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8'
            )
        except OSError:
            root.warning("Could not open log file %s, using console only", log_path)
        else:
            _attach(root, handler, formatter)

    _state['configured'] = True


def reset_logging() -> None:
    """Drop handlers installed by setup_logging (used by tests)."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if any(isinstance(f, _RecordContext) for f in handler.filters):
            root.removeHandler(handler)
            handler.close()
    _state['configured'] = False
    _state['service'] = PACKAGE


def get_logger(name: Optional[str] = None, **context) -> logging.LoggerAdapter:
    """Logger adapter whose records carry ``context`` (e.g. ``component='controller'``)."""
    name = name or PACKAGE
    context.setdefault('area', context.get('component') or area_for(name))
    return logging.LoggerAdapter(logging.getLogger(name), context)
