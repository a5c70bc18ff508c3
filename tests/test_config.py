import pytest

from logistik.core.config import Settings


def test_file_urls_become_sqlite_urls():
    assert Settings(DATABASE_URL="file:data/app.db").database_url == "sqlite:///data/app.db"
    assert Settings(DATABASE_URL="postgresql://db/logistik").database_url == "postgresql://db/logistik"


def test_cors_origins_list():
    assert Settings(CORS_ORIGINS="https://a.id, https://b.id,").cors_origins_list == ["https://a.id", "https://b.id"]


def test_development_only_warns():
    config = Settings(SECRET_KEY="change-me", ENVIRONMENT="development")
    with pytest.warns(UserWarning, match="placeholder"):
        assert config.validate_security_settings() is False


def test_production_refuses_insecure_settings():
    config = Settings(SECRET_KEY="x" * 40, ENVIRONMENT="production", DEBUG=True, API_KEY="")
    with pytest.raises(ValueError) as excinfo:
        config.validate_security_settings()
    assert "DEBUG is enabled" in str(excinfo.value)
    assert "API_KEY is empty" in str(excinfo.value)

    secure = Settings(SECRET_KEY="x" * 40, ENVIRONMENT="production", API_KEY="kunci")
    assert secure.validate_security_settings() is True
