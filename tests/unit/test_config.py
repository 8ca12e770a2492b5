"""Test SupplySettings loading from defaults, TOML and environment."""

import pytest
from pydantic import ValidationError

from supply.core.config import SupplySettings, load_settings


class TestSettingsDefaults:
    def test_default_settings(self):
        settings = SupplySettings()
        assert settings.observability.log_level == "INFO"
        assert settings.observability.log_format == "json"
        assert settings.observability.metrics_enabled is True

    def test_default_mixin_names(self):
        settings = SupplySettings()
        assert settings.mixin.run == "each"
        assert settings.mixin.add == "before"
        assert settings.mixin.remove == "remove"
        assert settings.mixin.attribute == "_supply"

    def test_rejects_unknown_log_format(self):
        with pytest.raises(ValidationError, match="log_format"):
            SupplySettings(observability={"log_format": "xml"})


class TestLoadSettings:
    def test_without_path(self):
        settings = load_settings()
        assert settings.observability.log_level == "INFO"

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.toml")
        assert settings.mixin.run == "each"

    def test_reads_toml(self, tmp_path):
        path = tmp_path / "supply.toml"
        path.write_text(
            '[observability]\nlog_level = "DEBUG"\nmetrics_enabled = false\n'
            '[mixin]\nrun = "dispatch"\n'
        )

        settings = load_settings(path)

        assert settings.observability.log_level == "DEBUG"
        assert settings.observability.metrics_enabled is False
        assert settings.mixin.run == "dispatch"
        assert settings.mixin.add == "before"

    def test_overrides_apply_on_top(self, tmp_path):
        path = tmp_path / "supply.toml"
        path.write_text('[mixin]\nrun = "dispatch"\n')

        settings = load_settings(path, overrides={"mixin": {"run": "fire"}})

        assert settings.mixin.run == "fire"


class TestEnvironment:
    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("SUPPLY_OBSERVABILITY__LOG_LEVEL", "WARNING")

        settings = SupplySettings()

        assert settings.observability.log_level == "WARNING"

    def test_env_disables_metrics(self, monkeypatch):
        monkeypatch.setenv("SUPPLY_OBSERVABILITY__METRICS_ENABLED", "false")

        assert load_settings().observability.metrics_enabled is False
