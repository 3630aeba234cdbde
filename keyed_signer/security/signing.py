from __future__ import annotations

import hmac
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

from loguru import logger

from keyed_signer.security import observers
from keyed_signer.security.canonical import (
    SIGNER_SUFFIX,
    Text,
    as_bytes,
    create_context,
    create_scope,
    create_string_to_sign,
    resolve_algorithm,
)
from keyed_signer.security.errors import SignerError
from keyed_signer.security.key_cache import BoundedKeyCache, SigningKeyCache, build_key_cache
from keyed_signer.security.observers import NullObserver, SignerEvent, SignerObserver

if TYPE_CHECKING:
    from keyed_signer.config.settings import SignerSettings

DEFAULT_ALGORITHM = 'sha512'


class SignerProtocol(Protocol):
    def get_self_key(self) -> Text: ...

    def get_client_id(self) -> Text: ...

    def get_client_secret(self) -> Text: ...

    def sign(self, payload: Mapping[Any, Any]) -> str: ...


def _hmac(algorithm: str, key: bytes, message: Text) -> bytes:
    return hmac.new(key, as_bytes(message), algorithm).digest()


def derive_signing_key(self_key: Text, client_id: Text, client_secret: Text, algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """Chain three keyed hashes so the result depends on the whole identity.

    Each stage keys the next one; the client secret is only ever used as a key.
    """
    algorithm = resolve_algorithm(algorithm)
    self_key_sign = _hmac(algorithm, as_bytes(client_secret), self_key)
    client_id_sign = _hmac(algorithm, self_key_sign, client_id)
    return _hmac(algorithm, client_id_sign, SIGNER_SUFFIX)


class Signer:
    """Signs scalar key/value payloads on behalf of a client keypair.

    The signing party is identified by ``self_key``; the client party by the
    ``client_id``/``client_secret`` pair that only it and the signer know.
    Signatures are lower-case hex HMACs and are independent of payload order
    and letter case.
    """

    def __init__(
        self,
        self_key: Text,
        client_id: Text,
        client_secret: Text,
        algorithm: str = DEFAULT_ALGORITHM,
        *,
        key_cache: SigningKeyCache | None = None,
        observer: SignerObserver | None = None,
    ) -> None:
        try:
            self._algorithm = resolve_algorithm(algorithm)
        except SignerError as exc:
            logger.bind(component='signer').warning('Signer rejected algorithm: {}', exc)
            raise
        self._self_key = self_key
        self._client_id = client_id
        self._client_secret = client_secret
        self._key_cache = key_cache if key_cache is not None else BoundedKeyCache()
        self._observer = observer if observer is not None else NullObserver()
        logger.bind(
            component='signer',
            algorithm=self._algorithm,
            key_cache=type(self._key_cache).__name__,
        ).info('Signer initialised')

    @classmethod
    def from_settings(cls, settings: SignerSettings | None = None, *, observer: SignerObserver | None = None) -> Signer:
        if settings is None:
            from keyed_signer.config.settings import get_settings

            settings = get_settings()
        return cls(
            settings.self_key,
            settings.client_id,
            settings.client_secret.get_secret_value(),
            settings.algorithm,
            key_cache=build_key_cache(settings.key_cache_size),
            observer=observer,
        )

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def key_cache(self) -> SigningKeyCache:
        return self._key_cache

    def get_self_key(self) -> Text:
        return self._self_key

    def get_client_id(self) -> Text:
        return self._client_id

    def get_client_secret(self) -> Text:
        return self._client_secret

    def _emit(self, name: str, **data: Any) -> None:
        self._observer.notify(SignerEvent(name, data))

    def signing_key(self) -> bytes:
        cache_key = (self._self_key, self._client_id, self._client_secret, self._algorithm)
        salt = self._key_cache.get_or_compute(
            cache_key,
            lambda: derive_signing_key(self._self_key, self._client_id, self._client_secret, self._algorithm),
        )
        self._emit(
            observers.SIGNING_KEY,
            self_key=self._self_key,
            client_id=self._client_id,
            client_secret=self._client_secret,
            signing_key=salt,
        )
        return salt

    def sign(self, payload: Mapping[Any, Any]) -> str:
        try:
            scope = create_scope(self._self_key, self._client_id)
            self._emit(observers.SCOPE, self_key=self._self_key, client_id=self._client_id, scope=scope)
            context = create_context(payload)
            self._emit(observers.CONTEXT, context=context)
        except SignerError as exc:
            logger.bind(component='signer').warning('Signer rejected payload: {}', exc)
            raise
        string_to_sign = create_string_to_sign(self._self_key, self._client_id, scope, context, self._algorithm)
        self._emit(observers.STRING_TO_SIGN, string_to_sign=string_to_sign)
        signature = hmac.new(self.signing_key(), as_bytes(string_to_sign), self._algorithm).hexdigest()
        self._emit(observers.SIGNATURE, signature=signature)
        return signature

    def verify(self, payload: Mapping[Any, Any], signature: str) -> bool:
        if not isinstance(signature, str):
            return False
        expected = self.sign(payload)
        try:
            return hmac.compare_digest(expected, signature.lower())
        except TypeError:
            return False

    def __repr__(self) -> str:
        return f'Signer(self_key={self._self_key!r}, client_id={self._client_id!r}, algorithm={self._algorithm!r})'
