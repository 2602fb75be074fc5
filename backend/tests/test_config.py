import pytest

from app.config import DEFAULT_SECRET, MIN_SECRET_BYTES, Settings
from app.errors import ConfigurationError


def test_settings_are_read_only():
    s = Settings()
    with pytest.raises(AttributeError):
        s.JWT_SECRET = "changed"


def test_overrides_apply():
    s = Settings(JWT_EXPIRE_DAYS=1, TIMEZONE="Asia/Kolkata")
    assert s.JWT_EXPIRE_DAYS == 1
    assert s.tzinfo.key == "Asia/Kolkata"


def test_unknown_override_rejected():
    with pytest.raises(ConfigurationError):
        Settings(NOT_A_SETTING=1)


def test_default_secret_rejected_outside_dev():
    with pytest.raises(ConfigurationError):
        Settings(ENV="prod", JWT_SECRET=DEFAULT_SECRET)
    s = Settings(ENV="prod", JWT_SECRET=DEFAULT_SECRET, ALLOW_INSECURE_JWT=True)
    assert s.ENV == "prod"


def test_short_secret_rejected_outside_dev(caplog):
    short = "s" * (MIN_SECRET_BYTES - 1)
    with pytest.raises(ConfigurationError):
        Settings(ENV="prod", JWT_SECRET=short)
    assert Settings(ENV="prod", JWT_SECRET=short, ALLOW_INSECURE_JWT=True).JWT_SECRET == short
    assert Settings(ENV="prod", JWT_SECRET="s" * MIN_SECRET_BYTES).ENV == "prod"

    with caplog.at_level("WARNING", logger="app.config"):
        Settings(ENV="dev", JWT_SECRET=short)
    assert "shorter than 32 bytes" in caplog.text


def test_default_secret_is_long_enough_for_hmac():
    assert len(DEFAULT_SECRET.encode()) >= MIN_SECRET_BYTES


@pytest.mark.parametrize("alg", ["RS256", "none"])
def test_non_hmac_algorithm_rejected(alg):
    with pytest.raises(ConfigurationError):
        Settings(JWT_ALGORITHM=alg)


def test_bad_timezone_rejected():
    with pytest.raises(ConfigurationError):
        Settings(TIMEZONE="Mars/Olympus_Mons")


def test_non_positive_lifetime_rejected():
    with pytest.raises(ConfigurationError):
        Settings(JWT_EXPIRE_DAYS=0)
