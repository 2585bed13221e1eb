"""
Rutas Seguras Backend — Settings Tests
======================================

What:  Range checks and the startup validation of security-critical settings.
"""

import pytest
from pydantic import ValidationError

from rutas_seguras.config import DEFAULT_JWT_SECRET, Settings

STRONG_SECRET = "s" * 48


class TestSettings:

    def test_short_secret_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(jwt_secret="too-short")

    def test_log_level_is_normalised(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_is_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_cors_origins_are_split(self):
        config = Settings(cors_origins="http://a.com, http://b.com,")
        assert config.cors_origins_list == ["http://a.com", "http://b.com"]

    def test_sqlite_detection(self):
        assert Settings(database_url="sqlite+aiosqlite:///x.db").is_sqlite is True
        assert Settings(database_url="postgresql+asyncpg://u:p@h/db").is_sqlite is False


class TestProductionValidation:

    def test_placeholder_secret_fails(self):
        with pytest.raises(ValueError, match="JWT_SECRET"):
            Settings(jwt_secret=DEFAULT_JWT_SECRET).validate_required_for_production()

    def test_wildcard_cors_fails(self):
        with pytest.raises(ValueError, match="CORS_ORIGINS"):
            Settings(jwt_secret=STRONG_SECRET, cors_origins="*").validate_required_for_production()

    def test_overridden_settings_pass(self):
        Settings(
            jwt_secret=STRONG_SECRET, cors_origins="https://rutas.example"
        ).validate_required_for_production()
