import pytest
from pydantic import ValidationError

from keyed_signer.config.settings import SignerSettings, get_settings
from keyed_signer.security import BoundedKeyCache, NullKeyCache, Signer

SIGNATURE_SHA512 = (
    'dfbffab5b6f7156402da8147886bba3eba67bd5baf2e780ba9d39e8437db7c47'
    '35e9a0b834aa21ac76f98da8c52a2a0cd1b0192d0f0df5c98e3848b1b2e1a037'
)


@pytest.fixture
def signer_env(monkeypatch):
    monkeypatch.setenv('SIGNER_SELF_KEY', 'Skyzyx')
    monkeypatch.setenv('SIGNER_CLIENT_ID', 'k3qDQy0Tr56v1ceo')
    monkeypatch.setenv('SIGNER_CLIENT_SECRET', 'O5j@pG@Jt%AzyiJTEfo!£LSz8yqSj)JX)S6FvW%58KjlS9bc%Fi7&&C4KSCT8hxd')
    for name in ('SIGNER_ALGORITHM', 'SIGNER_KEY_CACHE_SIZE', 'SIGNER_LOG_LEVEL', 'SIGNER_LOG_JSON'):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_settings_load_from_environment(signer_env):
    settings = SignerSettings(_env_file=None)
    assert settings.self_key == 'Skyzyx'
    assert settings.algorithm == 'sha512'
    assert settings.key_cache_size == 50
    assert settings.log_level == 'INFO'
    assert 'O5j@' not in repr(settings)


def test_settings_normalize_algorithm_and_level(signer_env):
    signer_env.setenv('SIGNER_ALGORITHM', ' SHA384 ')
    signer_env.setenv('SIGNER_LOG_LEVEL', 'debug')
    settings = SignerSettings(_env_file=None)
    assert settings.algorithm == 'sha384'
    assert settings.log_level == 'DEBUG'


@pytest.mark.parametrize(
    ('name', 'value'),
    [
        ('SIGNER_ALGORITHM', 'md17'),
        ('SIGNER_LOG_LEVEL', 'LOUD'),
        ('SIGNER_KEY_CACHE_SIZE', '-1'),
        ('SIGNER_CLIENT_SECRET', '   '),
        ('SIGNER_SELF_KEY', ''),
    ],
)
def test_settings_reject_invalid_values(signer_env, name, value):
    signer_env.setenv(name, value)
    with pytest.raises(ValidationError):
        SignerSettings(_env_file=None)


def test_settings_require_credentials(monkeypatch):
    for name in ('SIGNER_SELF_KEY', 'SIGNER_CLIENT_ID', 'SIGNER_CLIENT_SECRET'):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(ValidationError):
        SignerSettings(_env_file=None)


def test_signer_from_settings(signer_env):
    signer = Signer.from_settings(SignerSettings(_env_file=None))
    assert isinstance(signer.key_cache, BoundedKeyCache)
    assert signer.key_cache.max_entries == 50
    assert signer.sign({
        'ClientID': 'k3qDQy0Tr56v1ceo',
        'Domain': 'foo.com',
        'Path': '/',
        'Expires': 'Wed, 13 Jan 2021 22:23:01 GMT',
        'Secure': None,
        'HttpOnly': None,
    }) == SIGNATURE_SHA512


def test_signer_from_cached_settings_with_cache_disabled(signer_env):
    signer_env.setenv('SIGNER_KEY_CACHE_SIZE', '0')
    signer = Signer.from_settings()
    assert isinstance(signer.key_cache, NullKeyCache)
    assert get_settings() is get_settings()
