from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, TextIO

from loguru import logger

if TYPE_CHECKING:
    from keyed_signer.config.settings import SignerSettings


def _json_line(record: dict[str, Any]) -> str:
    payload = {
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'level': record['level'].name,
        'module': record['module'],
        'function': record['function'],
        'line': record['line'],
        'message': record['message'],
    }
    if record['extra']:
        payload['extra'] = record['extra']
    return json.dumps(payload, ensure_ascii=False, default=str)


def _json_sink(stream: TextIO):
    def sink(message) -> None:
        stream.write(_json_line(message.record) + '\n')

    return sink


def configure_logging(level: str = 'INFO', *, json_output: bool = True, sink: TextIO | None = None) -> int:
    """Replace loguru handlers with a single sink and return its handler id."""
    stream = sink if sink is not None else sys.stdout
    logger.remove()
    if json_output:
        return logger.add(_json_sink(stream), level=level, backtrace=False, diagnose=False)
    return logger.add(stream, level=level, backtrace=False, diagnose=False)


def configure_logging_from_settings(settings: SignerSettings | None = None, *, sink: TextIO | None = None) -> int:
    if settings is None:
        from keyed_signer.config.settings import get_settings

        settings = get_settings()
    return configure_logging(settings.log_level, json_output=settings.log_json, sink=sink)
