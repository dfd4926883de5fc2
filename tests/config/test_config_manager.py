"""
Unit tests for Configuration Manager.

Tests settings file discovery, layered loading, validation, and
environment variable integration.
"""

import pytest
import yaml
from pathlib import Path

from multiformatter.config.manager import ConfigurationManager, settings_path_for
from multiformatter.config.schema import KEY_FORMATTERS, SettingsScope
from multiformatter.formatters.errors import SettingsError


def write_settings(directory: Path, content: str) -> Path:
    path = settings_path_for(directory)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestConfigurationManager:
    """Test suite for ConfigurationManager."""

    @pytest.fixture
    def home(self, tmp_path):
        home = tmp_path / "home"
        home.mkdir()
        return home

    @pytest.fixture
    def manager(self, home):
        return ConfigurationManager(config_home=home, environ={})

    def test_load_default_configuration(self, manager):
        """Test loading defaults with no files or overrides."""
        store = manager.load_store()

        assert store.scopes == [SettingsScope.GLOBAL]
        assert store.get("multiformatter.formatterDelay") == 300
        assert store.get("multiformatter.saveAfterEachFormatter") is True
        assert store.get(KEY_FORMATTERS) == []

    def test_layers_are_loaded_per_scope(self, manager, home, tmp_path):
        (home / "settings.yaml").write_text("multiformatter.formatters: [global]\n")
        root = tmp_path / "project"
        folder = root / "packages" / "api"
        folder.mkdir(parents=True)
        write_settings(root, "multiformatter.formatters: [workspace]\n")
        write_settings(folder, '"[python]":\n  multiformatter.formatters: [folder]\n')

        store = manager.load_store(workspace_root=root, folder=folder)

        assert store.scopes == [SettingsScope.GLOBAL, SettingsScope.WORKSPACE, SettingsScope.WORKSPACE_FOLDER]
        assert store.get(KEY_FORMATTERS) == ["workspace"]
        assert store.get(KEY_FORMATTERS, "python") == ["folder"]
        assert store.layer(SettingsScope.WORKSPACE_FOLDER).existed

    def test_folder_equal_to_root_adds_no_layer(self, manager, tmp_path):
        store = manager.load_store(workspace_root=tmp_path, folder=tmp_path)
        assert store.narrowest_scope() == SettingsScope.WORKSPACE

    def test_missing_workspace_file_is_an_empty_layer(self, manager, tmp_path):
        store = manager.load_store(workspace_root=tmp_path)
        layer = store.layer(SettingsScope.WORKSPACE)

        assert layer.values == {}
        assert not layer.existed
        assert layer.path == settings_path_for(tmp_path)

    def test_explicit_config_file_replaces_global_settings(self, manager, home, tmp_path):
        (home / "settings.yaml").write_text("multiformatter.formatterDelay: 100\n")
        custom = tmp_path / "custom.yaml"
        custom.write_text("multiformatter.formatterDelay: 50\n")

        store = manager.load_store(config_file=str(custom))

        assert store.get("multiformatter.formatterDelay") == 50
        assert store.layer(SettingsScope.GLOBAL).path == custom

    def test_missing_explicit_config_file_raises(self, manager, tmp_path):
        with pytest.raises(SettingsError, match="Settings file not found"):
            manager.load_store(config_file=str(tmp_path / "missing.yaml"))

    def test_invalid_yaml_raises_settings_error_with_line(self, manager, home):
        (home / "settings.yaml").write_text("multiformatter.formatters: [a, b\n")

        with pytest.raises(SettingsError) as exc_info:
            manager.load_store()

        assert "Line" in str(exc_info.value)
        assert exc_info.value.path == str(home / "settings.yaml")

    def test_invalid_value_type_raises(self, manager, home):
        (home / "settings.yaml").write_text("multiformatter.formatterDelay: soon\n")

        with pytest.raises(SettingsError, match="formatterDelay must be a number"):
            manager.load_store()

    def test_environment_overrides_files(self, home, tmp_path):
        (home / "settings.yaml").write_text("multiformatter.formatterDelay: 100\n")
        manager = ConfigurationManager(
            config_home=home,
            environ={"MULTIFORMATTER_FORMATTER_DELAY": "25", "MULTIFORMATTER_DEBUG": "true"},
        )

        store = manager.load_store()

        assert store.get("multiformatter.formatterDelay") == 25
        assert store.get("multiformatter.debugMode") is True

    def test_cli_overrides_beat_environment(self, home):
        manager = ConfigurationManager(config_home=home, environ={"MULTIFORMATTER_FORMATTER_DELAY": "25"})

        store = manager.load_store(cli_overrides={"multiformatter.formatterDelay": 0})

        assert store.get("multiformatter.formatterDelay") == 0

    def test_unusable_environment_values_are_logged(self, home, caplog):
        manager = ConfigurationManager(
            config_home=home,
            environ={"MULTIFORMATTER_FORMATTER_DELAY": "fast", "MULTIFORMATTER_LOG_LEVEL": "loud"},
        )

        store = manager.load_store()

        assert store.get("multiformatter.formatterDelay") == 300
        assert "Invalid MULTIFORMATTER_FORMATTER_DELAY: 'fast'. Must be an integer; ignored" in caplog.text
        assert "Invalid MULTIFORMATTER_LOG_LEVEL" in caplog.text

    def test_config_home_from_environment(self, tmp_path):
        manager = ConfigurationManager(environ={"MULTIFORMATTER_CONFIG_HOME": str(tmp_path)})
        assert manager.global_settings_path == tmp_path / "settings.yaml"
        assert manager.conflicts_record_path == tmp_path / "conflicts.json"


class TestEnvironmentVariableSubstitution:

    def test_substitutes_variables_and_defaults(self, tmp_path):
        manager = ConfigurationManager(config_home=tmp_path, environ={"TOOLS": "/opt/tools"})

        assert manager.substitute_environment_variables("${TOOLS}/black -") == "/opt/tools/black -"
        assert manager.substitute_environment_variables("${LINE:-88}") == "88"
        assert manager.substitute_environment_variables({"a": ["${TOOLS}"]}) == {"a": ["/opt/tools"]}
        assert manager.substitute_environment_variables(5) == 5

    def test_missing_required_variable_raises(self, tmp_path):
        manager = ConfigurationManager(config_home=tmp_path, environ={})

        with pytest.raises(SettingsError, match="'FORMATTER_HOME' is not set"):
            manager.substitute_environment_variables("${FORMATTER_HOME}/fmt")


class TestTemplates:

    def test_template_is_valid_settings(self, tmp_path):
        manager = ConfigurationManager(config_home=tmp_path, environ={})
        path = manager.write_template(tmp_path / "settings.yaml", SettingsScope.WORKSPACE)

        content = path.read_text()
        assert content.startswith("# Multi Formatter settings (Workspace scope)")
        assert manager.load_layer(SettingsScope.WORKSPACE, path).existed
        assert yaml.safe_load(content)["multiformatter.formatterDelay"] == 300

    def test_existing_file_needs_force(self, tmp_path):
        manager = ConfigurationManager(config_home=tmp_path, environ={})
        target = tmp_path / "settings.yaml"
        target.write_text("editor.formatOnSave: true\n")

        with pytest.raises(SettingsError, match="already exists"):
            manager.write_template(target, SettingsScope.GLOBAL)

        manager.write_template(target, SettingsScope.GLOBAL, force=True)
        assert "Global scope" in target.read_text()

    def test_invalid_settings_file_is_rejected(self, tmp_path):
        manager = ConfigurationManager(config_home=tmp_path, environ={})
        path = tmp_path / "settings.yaml"
        path.write_text('"[python]":\n  multiformatter.debugMode: true\n')

        with pytest.raises(SettingsError, match=r"\[python\]: multiformatter.debugMode cannot be set per language"):
            manager.load_layer(SettingsScope.WORKSPACE, path)
