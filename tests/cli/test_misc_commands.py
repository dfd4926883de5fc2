"""
Tests for the chain, conflicts, toggle-debug and init commands.
"""

import pytest

from cli import main
from cli.help_texts import ExitCodes
from multiformatter.config.manager import ConfigurationManager
from multiformatter.config.schema import KEY_DEBUG_MODE, SettingsScope


CONFLICTING_GLOBAL_SETTINGS = """\
"[python]":
  editor.defaultFormatter: black
  editor.formatOnSave: true
"""


@pytest.fixture
def empty_dir(tmp_path, monkeypatch):
    """Working directory outside any workspace."""
    directory = tmp_path / "elsewhere"
    directory.mkdir()
    monkeypatch.chdir(directory)
    return directory


def global_settings(config_home):
    return config_home / "settings.yaml"


class TestChainCommand:

    def test_shows_resolved_chain(self, runner, python_file):
        result = runner.invoke(main, ["chain", str(python_file)])

        assert result.exit_code == 0, result.output
        assert "Language: python" in result.output
        assert "Chain (language):" in result.output
        assert "1. builtin.trimTrailingWhitespace" in result.output
        assert "2. builtin.trimFinalNewlines" in result.output
        assert "Formatter delay: 0ms" in result.output
        assert "Scope written during runs: Workspace" in result.output

    def test_language_without_formatters(self, runner, workspace):
        result = runner.invoke(main, ["chain", "--language", "ruby"])

        assert result.exit_code == 0, result.output
        assert "Chain (none):" in result.output

    def test_requires_path_or_language(self, runner, workspace):
        result = runner.invoke(main, ["chain"])

        assert result.exit_code == ExitCodes.MISSING_REQUIRED_OPTION
        assert "Provide a PATH or --language" in result.output


class TestConflictsCommand:

    def test_strict_exits_while_conflicts_are_active(self, runner, config_home, empty_dir):
        global_settings(config_home).write_text(CONFLICTING_GLOBAL_SETTINGS, encoding="utf-8")

        result = runner.invoke(main, ["conflicts", "--strict"])

        assert result.exit_code == ExitCodes.CONFLICTS_FOUND
        assert "Formatting conflict for python" in result.output
        assert "Active conflicts: python" in result.output
        assert (config_home / "conflicts.json").exists()

    def test_known_conflict_is_not_announced_again(self, runner, config_home, empty_dir):
        global_settings(config_home).write_text(CONFLICTING_GLOBAL_SETTINGS, encoding="utf-8")
        runner.invoke(main, ["conflicts"])

        result = runner.invoke(main, ["conflicts"])

        assert result.exit_code == 0
        assert "Formatting conflict for python:" not in result.output
        assert "Active conflicts: python" in result.output

    def test_resolution_is_announced(self, runner, config_home, empty_dir):
        settings = global_settings(config_home)
        settings.write_text(CONFLICTING_GLOBAL_SETTINGS, encoding="utf-8")
        runner.invoke(main, ["conflicts"])
        settings.write_text(
            CONFLICTING_GLOBAL_SETTINGS.replace("formatOnSave: true", "formatOnSave: false"),
            encoding="utf-8",
        )

        result = runner.invoke(main, ["conflicts", "--strict"])

        assert result.exit_code == 0
        assert "Formatting conflict for python resolved." in result.output
        assert "No formatting conflicts." in result.output
        assert not (config_home / "conflicts.json").exists()

    def test_warnings_disabled(self, runner, config_home, empty_dir):
        global_settings(config_home).write_text(
            CONFLICTING_GLOBAL_SETTINGS + "multiformatter.showFormattingConflictWarnings: false\n",
            encoding="utf-8",
        )

        result = runner.invoke(main, ["conflicts", "--strict"])

        assert result.exit_code == 0
        assert "Conflict warnings are disabled" in result.output


class TestToggleDebugCommand:

    def test_on_writes_global_setting(self, runner, config_home, empty_dir):
        result = runner.invoke(main, ["toggle-debug", "--on"])

        assert result.exit_code == 0, result.output
        assert "debug mode enabled" in result.output
        assert ConfigurationManager().load_store().get(KEY_DEBUG_MODE) is True

    def test_toggle_flips_current_value(self, runner, config_home, empty_dir):
        global_settings(config_home).write_text("multiformatter.debugMode: true\n", encoding="utf-8")

        result = runner.invoke(main, ["toggle-debug"])

        assert result.exit_code == 0, result.output
        assert "debug mode disabled" in result.output
        assert ConfigurationManager().load_store().get(KEY_DEBUG_MODE) is False

    def test_explicit_config_file(self, runner, tmp_path, empty_dir):
        config = tmp_path / "team.yaml"
        config.write_text("multiformatter.formatterDelay: 100\n", encoding="utf-8")

        result = runner.invoke(main, ["toggle-debug", "--on", "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "debugMode" in config.read_text(encoding="utf-8")


class TestInitCommand:

    def test_writes_workspace_template(self, runner, empty_dir):
        result = runner.invoke(main, ["init"])

        target = empty_dir / ".multiformatter" / "settings.yaml"
        assert result.exit_code == 0, result.output
        assert "Settings template written to" in result.output
        assert "Workspace scope" in target.read_text(encoding="utf-8")

    def test_existing_file_requires_force(self, runner, empty_dir):
        runner.invoke(main, ["init"])

        result = runner.invoke(main, ["init"])
        assert result.exit_code == ExitCodes.GENERAL_ERROR
        assert "already exists" in result.output

        result = runner.invoke(main, ["init", "--force"])
        assert result.exit_code == 0, result.output

    def test_global_template(self, runner, config_home, empty_dir):
        result = runner.invoke(main, ["init", "--scope", "global"])

        assert result.exit_code == 0, result.output
        assert "Global scope" in global_settings(config_home).read_text(encoding="utf-8")

    def test_template_is_valid_settings(self, runner, empty_dir):
        runner.invoke(main, ["init"])

        path = empty_dir / ".multiformatter" / "settings.yaml"
        layer = ConfigurationManager().load_layer(SettingsScope.WORKSPACE, path)
        assert layer.values["multiformatter.formatterDelay"] == 300
