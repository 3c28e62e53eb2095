import pytest

from scenevault.cli.common import (
    EXIT_CREDENTIAL,
    EXIT_FAILED,
    EXIT_QUOTA,
    EXIT_USAGE,
    exit_code_for,
)
from scenevault.env import ConfigError
from scenevault.errors import (
    CredentialError,
    NetworkError,
    NotFoundError,
    ParseError,
    PersistenceError,
    QuotaError,
    SceneVaultError,
    SizeLimitError,
    ValidationError,
    error_for_code,
)


@pytest.mark.parametrize(
    "code,cls",
    [
        ("INVALID_API_KEY", CredentialError),
        ("MISSING_API_KEY", CredentialError),
        ("QUOTA_EXCEEDED", QuotaError),
        ("PLAYLIST_NOT_FOUND", NotFoundError),
        ("NO_VIDEOS_FOUND", NotFoundError),
        ("PLAYLIST_TOO_LARGE", SizeLimitError),
        ("NETWORK_ERROR", NetworkError),
    ],
)
def test_error_for_code_maps_provider_codes(code, cls):
    err = error_for_code(code)

    assert isinstance(err, cls)
    assert err.code == code
    assert err.user_message == cls.default_message


def test_unknown_code_keeps_code_and_message():
    err = error_for_code("SOMETHING_ELSE", "Upstream said no")

    assert type(err) is SceneVaultError
    assert err.code == "SOMETHING_ELSE"
    assert str(err) == "Upstream said no"


def test_only_credential_errors_point_at_settings():
    assert CredentialError().settings_hint is True
    assert QuotaError().settings_hint is False
    assert ValidationError().settings_hint is False


def test_size_limit_message_names_the_limit():
    assert "500" in SizeLimitError().user_message


@pytest.mark.parametrize(
    "error,code",
    [
        (QuotaError(), EXIT_QUOTA),
        (CredentialError(code="MISSING_API_KEY"), EXIT_CREDENTIAL),
        (ValidationError(), EXIT_USAGE),
        (ParseError(), EXIT_USAGE),
        (ConfigError("bad"), EXIT_USAGE),
        (NetworkError(), EXIT_FAILED),
        (PersistenceError(), EXIT_FAILED),
    ],
)
def test_exit_codes(error, code):
    assert exit_code_for(error) == code
