"""Tests for validator settings."""

import json

import pytest
import yaml

from dataknobs_validator import (
    ConfigurationError,
    Mode,
    ValidatorSettings,
    configure,
    get_settings,
    load_settings,
)
from dataknobs_validator import validator as validator_module
from dataknobs_validator.trace import get_tracer


class TestValidatorSettings:
    """Test the settings dataclass."""

    def test_defaults(self):
        settings = ValidatorSettings()

        assert settings.pool_max_size == 10
        assert settings.trace is False
        assert settings.error_prefix == ""
        assert settings.mode is Mode.ON_ERROR_THROW

    def test_from_dict_coerces_mode(self):
        settings = ValidatorSettings.from_dict({"mode": "ON_ERROR_BREAK", "error_prefix": "Error:"})

        assert settings.mode is Mode.ON_ERROR_BREAK
        assert settings.error_prefix == "Error:"

    def test_from_dict_uses_validator_section(self):
        settings = ValidatorSettings.from_dict({"validator": {"pool_max_size": 3}, "other": {}})
        assert settings.pool_max_size == 3

    def test_unknown_key_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ValidatorSettings.from_dict({"pool_size": 3})

        assert exc_info.value.context["unknown"] == ["pool_size"]

    @pytest.mark.parametrize(
        "data",
        [
            {"pool_max_size": "10"},
            {"pool_max_size": -1},
            {"pool_max_size": True},
            {"trace": "yes"},
            {"error_prefix": 1},
            {"mode": "sometimes"},
        ],
    )
    def test_invalid_values_raise(self, data):
        with pytest.raises(ConfigurationError):
            ValidatorSettings.from_dict(data)

    def test_to_dict(self):
        assert ValidatorSettings(mode=Mode.ON_ERROR_BREAK).to_dict() == {
            "pool_max_size": 10,
            "trace": False,
            "error_prefix": "",
            "mode": "on_error_break",
        }


class TestSettingsFiles:
    """Test loading settings from files."""

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "validator.yaml"
        path.write_text(yaml.safe_dump({"validator": {"pool_max_size": 20, "mode": "on_error_next_path"}}))

        settings = ValidatorSettings.from_file(path)

        assert settings.pool_max_size == 20
        assert settings.mode is Mode.ON_ERROR_NEXT_PATH

    def test_from_json(self, tmp_path):
        path = tmp_path / "validator.json"
        path.write_text(json.dumps({"error_prefix": "Error:", "trace": True}))

        settings = ValidatorSettings.from_file(str(path))

        assert settings.error_prefix == "Error:"
        assert settings.trace is True

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "validator.yml"
        path.write_text("")

        assert ValidatorSettings.from_file(path) == ValidatorSettings()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ValidatorSettings.from_file(tmp_path / "missing.yaml")

    def test_unsupported_suffix_raises(self, tmp_path):
        path = tmp_path / "validator.ini"
        path.write_text("[validator]")

        with pytest.raises(ConfigurationError):
            ValidatorSettings.from_file(path)


class TestEnvironmentOverrides:
    """Test DATAKNOBS_VALIDATOR_* environment variables."""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DATAKNOBS_VALIDATOR_POOL_MAX_SIZE", "1")
        monkeypatch.setenv("DATAKNOBS_VALIDATOR_TRACE", "yes")
        monkeypatch.setenv("DATAKNOBS_VALIDATOR_ERROR_PREFIX", "Env:")
        monkeypatch.setenv("DATAKNOBS_VALIDATOR_MODE", "on_error_break")

        settings = ValidatorSettings().with_env_overrides()

        assert settings.pool_max_size == 1
        assert settings.trace is True
        assert settings.error_prefix == "Env:"
        assert settings.mode is Mode.ON_ERROR_BREAK

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "validator.yaml"
        path.write_text(yaml.safe_dump({"error_prefix": "File:"}))
        monkeypatch.setenv("DATAKNOBS_VALIDATOR_ERROR_PREFIX", "Env:")

        assert load_settings(path).error_prefix == "Env:"
        assert load_settings(path, use_env=False).error_prefix == "File:"

    def test_invalid_env_value_raises(self, monkeypatch):
        monkeypatch.setenv("DATAKNOBS_VALIDATOR_POOL_MAX_SIZE", "many")

        with pytest.raises(ConfigurationError):
            ValidatorSettings().with_env_overrides()

    def test_explicit_environ(self):
        settings = ValidatorSettings().with_env_overrides({"DATAKNOBS_VALIDATOR_TRACE": "off"})
        assert settings.trace is False

    def test_string_fields_keep_raw_value(self):
        """Test that numeric-looking values of string fields are not converted."""
        settings = ValidatorSettings().with_env_overrides({"DATAKNOBS_VALIDATOR_ERROR_PREFIX": "1.5"})
        assert settings.error_prefix == "1.5"

    def test_get_settings_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DATAKNOBS_VALIDATOR_ERROR_PREFIX", "Env:")
        assert get_settings().error_prefix == "Env:"


class TestConfigure:
    """Test activating settings."""

    def test_configure_overrides(self):
        settings = configure(pool_max_size=4, error_prefix="Err:")

        assert get_settings() is settings
        assert settings.error_prefix == "Err:"
        assert validator_module._validator_pool.max_size == 4
        assert validator_module._surface_pool.max_size == 4

    def test_configure_enables_trace(self):
        configure(trace=True)
        assert get_tracer() is not None

        configure(trace=False)
        assert get_tracer() is None

    def test_configure_with_settings(self):
        settings = configure(load_settings({"mode": "on_error_next_path"}, use_env=False))
        assert get_settings().mode is Mode.ON_ERROR_NEXT_PATH
        assert settings.mode is Mode.ON_ERROR_NEXT_PATH

    def test_configure_unknown_override_raises(self):
        with pytest.raises(ConfigurationError):
            configure(pool=3)

    def test_unsupported_source_raises(self):
        with pytest.raises(ConfigurationError):
            load_settings(42)
