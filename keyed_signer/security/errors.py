from __future__ import annotations


class SignerError(ValueError):
    """Signing request could not be completed."""


class InvalidAlgorithmError(SignerError):
    pass


class InvalidPayloadValueError(SignerError):
    def __init__(self, key: object, value: object, reason: str = 'value must be scalar') -> None:
        self.key = key
        self.value = value
        super().__init__(f'Invalid payload entry key={key!r}: {reason} (got {type(value).__name__})')
