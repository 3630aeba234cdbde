from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from keyed_signer.security.canonical import resolve_algorithm
from keyed_signer.security.errors import InvalidAlgorithmError

LOG_LEVELS: tuple[str, ...] = ('TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL')


class SignerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='SIGNER_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    self_key: str = Field(description='Identifier of the signing party.')
    client_id: str = Field(description='Public half of the client keypair.')
    client_secret: SecretStr = Field(description='Private half of the client keypair.')
    algorithm: str = Field(default='sha512')
    key_cache_size: int = Field(default=50, ge=0, le=100_000, description='0 disables derived-key caching.')
    log_level: str = Field(default='INFO')
    log_json: bool = Field(default=True)

    @field_validator('self_key', 'client_id')
    @classmethod
    def non_blank_identity(cls, value: str) -> str:
        if not value.strip():
            raise ValueError('self_key and client_id must not be blank.')
        return value

    @field_validator('client_secret')
    @classmethod
    def non_blank_secret(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError('client_secret must not be blank.')
        return value

    @field_validator('algorithm')
    @classmethod
    def supported_algorithm(cls, value: str) -> str:
        try:
            return resolve_algorithm(value)
        except InvalidAlgorithmError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator('log_level')
    @classmethod
    def known_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f'log_level must be one of {", ".join(LOG_LEVELS)}.')
        return normalized


@lru_cache(maxsize=1)
def get_settings() -> SignerSettings:
    return SignerSettings()
