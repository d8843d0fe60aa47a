import pytest
from pydantic import ValidationError
from civic_intake.core.config import Settings


def test_placeholder_secret_is_rejected():
    with pytest.raises(ValidationError):
        Settings(SECRET_KEY="your-secret-key-change-in-production")


def test_short_secret_is_rejected():
    with pytest.raises(ValidationError):
        Settings(SECRET_KEY="too-short")


def test_production_flag_and_cors_parsing():
    settings = Settings(
        SECRET_KEY="a" * 48,
        ENVIRONMENT="production",
        CORS_ORIGINS="https://city.example.org, https://admin.city.example.org,",
    )
    assert settings.is_production
    assert settings.get_cors_origins() == ["https://city.example.org", "https://admin.city.example.org"]
