import pytest
from pydantic import ValidationError

from club_selection.core.config import Settings

pytestmark = pytest.mark.unit

SECRET = "x" * 40


def test_defaults():
    settings = Settings(JWT_SECRET=SECRET, ENV="dev")
    assert settings.is_development
    assert settings.is_sqlite
    assert settings.DEFAULT_TIMEZONE == "UTC"


def test_short_secret_rejected():
    with pytest.raises(ValidationError):
        Settings(JWT_SECRET="short")


@pytest.mark.parametrize("field, value", [
    ("ENV", "qa"),
    ("LOG_LEVEL", "LOUD"),
    ("DATABASE_URL", "mysql://localhost/clubs"),
    ("DEFAULT_TIMEZONE", "Mars/Olympus"),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(JWT_SECRET=SECRET, **{field: value})


def test_cors_origins_accept_comma_separated_string():
    settings = Settings(JWT_SECRET=SECRET, CORS_ORIGINS="https://a.example, https://b.example")
    assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]
