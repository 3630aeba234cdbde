from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol

from loguru import logger

SCOPE = 'scope'
CONTEXT = 'context'
STRING_TO_SIGN = 'string_to_sign'
SIGNING_KEY = 'signing_key'
SIGNATURE = 'signature'

EVENT_ORDER: tuple[str, ...] = (SCOPE, CONTEXT, STRING_TO_SIGN, SIGNING_KEY, SIGNATURE)

_SENSITIVE_FIELDS = frozenset({'client_secret'})


@dataclass(frozen=True, slots=True)
class SignerEvent:
    name: str
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'data', MappingProxyType(dict(self.data)))


class SignerObserver(Protocol):
    def notify(self, event: SignerEvent) -> None: ...


class NullObserver:
    def notify(self, event: SignerEvent) -> None:
        return None


def redact(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``data`` safe to write to logs."""
    safe: dict[str, Any] = {}
    for name, value in data.items():
        if name in _SENSITIVE_FIELDS:
            safe[name] = '***'
        elif isinstance(value, (bytes, bytearray)):
            safe[name] = f'<{len(value)} bytes>'
        else:
            safe[name] = value
    return safe


class LoguruObserver:
    """Writes every signer event to loguru, masking secrets and key material."""

    def __init__(self, level: str = 'DEBUG') -> None:
        self.level = level

    def notify(self, event: SignerEvent) -> None:
        logger.bind(component='signer', event=event.name, **redact(event.data)).log(self.level, f'signer.{event.name}')
