from __future__ import annotations

import hashlib
import math
from collections.abc import Mapping
from typing import Any, Union

from keyed_signer.security.errors import InvalidAlgorithmError, InvalidPayloadValueError

Text = Union[str, bytes]

SIGNER_SUFFIX = 'signer'
HEADER_PREFIX = 'SIGNER-HMAC-'

_ASCII_LOWER = str.maketrans('ABCDEFGHIJKLMNOPQRSTUVWXYZ', 'abcdefghijklmnopqrstuvwxyz')
_MAX_EXACT_FLOAT = 1e15


def as_text(value: Text) -> str:
    """Text view of an identity component; undecodable bytes survive as surrogates."""
    return value.decode('utf-8', 'surrogateescape') if isinstance(value, (bytes, bytearray)) else value


def as_bytes(value: Text) -> bytes:
    return bytes(value) if isinstance(value, (bytes, bytearray)) else value.encode('utf-8', 'surrogateescape')


def ascii_lower(value: str) -> str:
    """Lower-case A-Z only, leaving every other code point untouched."""
    return value.translate(_ASCII_LOWER)


def resolve_algorithm(name: str) -> str:
    """Normalise a digest name and make sure the runtime can compute it."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidAlgorithmError(f'Digest algorithm name must be a non-empty string, got {name!r}')
    normalized = name.strip().lower()
    try:
        digest = hashlib.new(normalized)
    except (ValueError, TypeError) as exc:
        raise InvalidAlgorithmError(f'Unsupported digest algorithm: {name!r}') from exc
    if digest.digest_size == 0:
        raise InvalidAlgorithmError(f'Variable-length digest not supported: {name!r}')
    return normalized


def hex_digest(algorithm: str, message: Text) -> str:
    return hashlib.new(algorithm, as_bytes(message)).hexdigest()


def normalize_key(key: Any) -> str:
    if isinstance(key, bool) or not isinstance(key, (str, int)):
        raise InvalidPayloadValueError(key, key, 'key must be str or int')
    return ascii_lower(str(key))


def normalize_value(key: Any, value: Any) -> str:
    """Text for a scalar payload value. Fractional floats use ``repr``; pass strings for exact control."""
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode('utf-8')
        except UnicodeDecodeError as exc:
            raise InvalidPayloadValueError(key, value, 'bytes must be valid UTF-8') from exc
    if isinstance(value, bool):
        return '1' if value else ''
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and abs(value) < _MAX_EXACT_FLOAT:
            return str(int(value))
        return repr(value)
    raise InvalidPayloadValueError(key, value)


def create_scope(self_key: Text, client_id: Text) -> str:
    return f'{as_text(self_key)}/{as_text(client_id)}/{SIGNER_SUFFIX}'


def create_context(payload: Mapping[Any, Any]) -> str:
    """Canonical form of ``payload``.

    Keys and values are lower-cased and rendered as ``key=value`` lines sorted by
    key. Keys that collide after lower-casing keep the value seen last. The lines
    are followed by a blank line and the ``;``-joined list of signed keys::

        domain=foo.com
        path=/

        domain;path
    """
    if not isinstance(payload, Mapping):
        raise InvalidPayloadValueError('<payload>', payload, 'payload must be a mapping')
    entries: dict[str, str] = {}
    for raw_key, raw_value in payload.items():
        key = normalize_key(raw_key)
        value = ascii_lower(normalize_value(raw_key, raw_value))
        entries[key] = f'{key}={value}'
    ordered = sorted(entries)
    return '\n'.join(entries[key] for key in ordered) + '\n\n' + ';'.join(ordered)


def create_string_to_sign(self_key: Text, client_id: Text, scope: str, context: str, algorithm: str) -> str:
    return '\n'.join(
        (
            f'{HEADER_PREFIX}{algorithm.upper()}',
            as_text(self_key),
            as_text(client_id),
            hex_digest(algorithm, scope),
            hex_digest(algorithm, context),
        )
    )
