from keyed_signer.security.canonical import create_context, create_scope, create_string_to_sign, resolve_algorithm
from keyed_signer.security.errors import InvalidAlgorithmError, InvalidPayloadValueError, SignerError
from keyed_signer.security.key_cache import BoundedKeyCache, NullKeyCache, SigningKeyCache
from keyed_signer.security.observers import LoguruObserver, NullObserver, SignerEvent, SignerObserver
from keyed_signer.security.signing import Signer, SignerProtocol, derive_signing_key

__all__ = [
    'BoundedKeyCache',
    'InvalidAlgorithmError',
    'InvalidPayloadValueError',
    'LoguruObserver',
    'NullKeyCache',
    'NullObserver',
    'Signer',
    'SignerError',
    'SignerEvent',
    'SignerObserver',
    'SignerProtocol',
    'SigningKeyCache',
    'create_context',
    'create_scope',
    'create_string_to_sign',
    'derive_signing_key',
    'resolve_algorithm',
]
