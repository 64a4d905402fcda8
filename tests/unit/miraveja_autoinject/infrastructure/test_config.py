"""Unit tests for AutoInjectSettings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from miraveja_autoinject.infrastructure.config import AutoInjectSettings


class TestAutoInjectSettings:
    """Test cases for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Test default values without environment variables."""
        for name in ("NAMESPACE", "ROUTINE_NAME", "SERVICES_PARAMETER", "SOURCE_DIR", "OUTPUT_DIR", "EXCLUDE", "LOG_LEVEL"):
            monkeypatch.delenv(f"AUTOINJECT_{name}", raising=False)
        settings = AutoInjectSettings()
        assert settings.namespace == "autoinject"
        assert settings.source_dir == Path("src")
        assert settings.output_dir is None
        assert settings.log_level == "WARNING"

    def test_environment_overrides(self, monkeypatch):
        """Test that AUTOINJECT_* variables are read."""
        monkeypatch.setenv("AUTOINJECT_NAMESPACE", "shop.generated")
        monkeypatch.setenv("AUTOINJECT_SERVICES_PARAMETER", "collection")
        monkeypatch.setenv("AUTOINJECT_EXCLUDE", '["migrations"]')
        monkeypatch.setenv("AUTOINJECT_LOG_LEVEL", "debug")
        settings = AutoInjectSettings()
        assert settings.namespace == "shop.generated"
        assert settings.exclude == ["migrations"]
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self):
        """Test that unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            AutoInjectSettings(log_level="LOUD")

    def test_to_generator_options(self):
        """Test conversion to generator options."""
        options = AutoInjectSettings(namespace="shop.di", routine_name="register_all").to_generator_options()
        assert options.registration_module == "shop.di.registration"
        assert options.routine_name == "register_all"

    def test_invalid_names_fail_on_conversion(self):
        """Test that names are validated when generator options are built."""
        with pytest.raises(ValidationError):
            AutoInjectSettings(routine_name="not valid").to_generator_options()
