"""
Unit tests for TurboTest configuration.

Tests defaults, YAML loading, environment priority and validation.

Usage:
    pytest tests/unit/test_config.py
"""

import pytest

from turbotest.config import (
    ConfigError,
    Settings,
    get_settings,
    load_config,
    override_settings,
    reset_settings,
)


class TestSettings:
    """Unit tests for the settings schema."""

    def test_defaults(self):
        """Test defaults match the front-end toolchain conventions."""
        settings = Settings()

        assert settings.cache_file == ".vscode/.turbo-cache.json"
        assert settings.lint_command == ["npx", "eslint"]
        assert settings.lint_fix_flag == "--fix"
        assert settings.lint_extensions == [".ts", ".html"]
        assert settings.test_command == ["npx", "ng", "test"]
        assert settings.test_args == [
            "--watch=false",
            "--code-coverage",
            "--karma-config=karma-parallel.conf.js",
        ]
        assert settings.spec_suffix == ".spec.ts"
        assert settings.source_suffix == ".ts"

    def test_extensions_are_normalized(self):
        """Test extensions without a dot get one."""
        assert Settings(lint_extensions=["ts", ".html"]).lint_extensions == [
            ".ts",
            ".html",
        ]

    def test_invalid_values_rejected(self):
        """Test empty commands and dotless suffixes are invalid."""
        with pytest.raises(ValueError):
            Settings(lint_command=[])
        with pytest.raises(ValueError):
            Settings(spec_suffix="spec.ts")


class TestLoadConfig:
    """Unit tests for load_config()."""

    def test_missing_yaml_uses_defaults(self, tmp_path):
        """Test absent turbo.yaml yields defaults."""
        assert load_config(tmp_path).spec_suffix == ".spec.ts"

    def test_yaml_overrides_defaults(self, tmp_path):
        """Test values from turbo.yaml are applied."""
        (tmp_path / "turbo.yaml").write_text(
            "cache_file: .cache/turbo.json\n"
            "test_args:\n"
            "  - --watch=false\n",
            encoding="utf-8",
        )

        settings = load_config(tmp_path)

        assert settings.cache_file == ".cache/turbo.json"
        assert settings.test_args == ["--watch=false"]

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        """Test TURBO_* variables win over the YAML file."""
        (tmp_path / "turbo.yaml").write_text(
            "cache_file: from-yaml.json\nverbose: 2\n", encoding="utf-8"
        )
        monkeypatch.setenv("TURBO_CACHE_FILE", "from-env.json")

        settings = load_config(tmp_path)

        assert settings.cache_file == "from-env.json"
        assert settings.verbose == 2

    def test_dotenv_overrides_yaml(self, tmp_path, monkeypatch):
        """Test TURBO_* values from the project's .env win over turbo.yaml."""
        # Register the variable so it is removed again after the test
        monkeypatch.setenv("TURBO_CACHE_FILE", "placeholder")
        monkeypatch.delenv("TURBO_CACHE_FILE")
        (tmp_path / "turbo.yaml").write_text(
            "cache_file: from-yaml.json\n", encoding="utf-8"
        )
        (tmp_path / ".env").write_text(
            "TURBO_CACHE_FILE=from-dotenv.json\n", encoding="utf-8"
        )

        assert load_config(tmp_path).cache_file == "from-dotenv.json"

    def test_env_overrides_dotenv(self, tmp_path, monkeypatch):
        """Test real environment variables are not replaced by .env."""
        monkeypatch.setenv("TURBO_CACHE_FILE", "from-env.json")
        (tmp_path / ".env").write_text(
            "TURBO_CACHE_FILE=from-dotenv.json\n", encoding="utf-8"
        )

        assert load_config(tmp_path).cache_file == "from-env.json"

    def test_explicit_file_must_exist(self, tmp_path):
        """Test a missing --config file is an error."""
        with pytest.raises(ConfigError):
            load_config(tmp_path, "missing.yaml")

    def test_invalid_yaml_raises_config_error(self, tmp_path):
        """Test unparsable YAML is wrapped in ConfigError."""
        (tmp_path / "turbo.yaml").write_text("cache_file: [unclosed\n")

        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_non_mapping_yaml_raises_config_error(self, tmp_path):
        """Test a YAML list is rejected."""
        (tmp_path / "turbo.yaml").write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_invalid_value_raises_config_error(self, tmp_path):
        """Test schema violations are wrapped in ConfigError."""
        (tmp_path / "turbo.yaml").write_text("verbose: 9\n")

        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestSettingsSingleton:
    """Unit tests for the global settings accessors."""

    def test_override_and_reset(self, tmp_path, monkeypatch):
        """Test override_settings replaces and reset_settings clears."""
        monkeypatch.chdir(tmp_path)
        custom = Settings(cache_file="custom.json")

        override_settings(custom)
        assert get_settings() is custom

        reset_settings()
        assert get_settings() is not custom
        assert get_settings().cache_file == ".vscode/.turbo-cache.json"
