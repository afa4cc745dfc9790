"""
ProjectHub Backend: Configuration Tests
=======================================

What we test:
    ✅ Field validators normalize or reject bad values
    ✅ validate_environment() errors and warnings per environment
    ✅ Log format resolution
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from projecthub.config import Settings

STRONG_SECRET = "k" * 48
PG_URL = "postgresql+asyncpg://app:pw@db:5432/projecthub"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": PG_URL,
        "jwt_secret": STRONG_SECRET,
        "environment": "development",
        "log_format": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestFieldValidators:

    def test_log_level_is_uppercased(self):
        assert make_settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            make_settings(log_level="LOUD")

    def test_invalid_environment(self):
        with pytest.raises(PydanticValidationError):
            make_settings(environment="staging")

    def test_invalid_log_format(self):
        with pytest.raises(PydanticValidationError):
            make_settings(log_format="xml")

    def test_cors_origins_list(self):
        settings = make_settings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


class TestLogFormat:

    def test_defaults_follow_environment(self):
        assert make_settings(environment="production").use_json_logs is True
        assert make_settings(environment="development").use_json_logs is False

    def test_explicit_format_wins(self):
        assert make_settings(environment="production", log_format="text").use_json_logs is False
        assert make_settings(log_format="JSON").use_json_logs is True


class TestValidateEnvironment:

    def test_clean_development_config(self):
        report = make_settings().validate_environment()
        assert report.valid
        assert report.warnings == []

    def test_non_postgres_url_is_an_error(self):
        report = make_settings(database_url="mysql://root@localhost/app").validate_environment()
        assert not report.valid
        assert "DATABASE_URL must be a PostgreSQL connection string" in report.errors

    def test_sqlite_allowed_outside_production(self):
        assert make_settings(database_url="sqlite+aiosqlite://").validate_environment().valid

        report = make_settings(
            environment="production", database_url="sqlite+aiosqlite://"
        ).validate_environment()
        assert not report.valid

    def test_short_secret_is_a_warning(self):
        report = make_settings(jwt_secret="short").validate_environment()
        assert report.valid
        assert "JWT_SECRET should be at least 32 characters" in report.warnings

    def test_placeholder_secret_in_production(self):
        report = make_settings(
            environment="production",
            database_url=PG_URL + "?ssl=require",
            jwt_secret="your-jwt-secret-" + "x" * 32,
        ).validate_environment()
        assert len(report.errors) == 1
        assert "development JWT_SECRET" in report.errors[0]

    def test_production_without_ssl_warns(self):
        report = make_settings(environment="production").validate_environment()
        assert report.valid
        assert "DATABASE_URL should enable SSL in production" in report.warnings

    def test_validate_required_for_production_raises(self):
        settings = make_settings(database_url="mysql://root@localhost/app")
        with pytest.raises(ValueError, match="PostgreSQL"):
            settings.validate_required_for_production()
