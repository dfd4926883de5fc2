"""
Configuration Manager for Multi Formatter.

This module locates, loads and validates the settings files of every
scope and assembles them into a SettingsStore:
- System defaults
- Global settings ($MULTIFORMATTER_CONFIG_HOME/settings.yaml, or --config)
- Workspace settings (<root>/.multiformatter/settings.yaml)
- Workspace folder settings (<folder>/.multiformatter/settings.yaml)
- Environment variables
- CLI arguments (highest precedence)

Unlike a flat merge, each file stays its own layer so that the pipeline
can write to one exact scope and language block and restore it later.
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional, Dict, Any, Mapping

from .environment import EnvironmentVariables
from .schema import SettingsScope, default_settings
from .store import SettingsLayer, SettingsStore
from .yaml_parser import ConfigurationYAMLParser, YAMLParsingError
from multiformatter.formatters.errors import SettingsError


logger = logging.getLogger(__name__)

SETTINGS_DIRNAME = ".multiformatter"
SETTINGS_FILENAME = "settings.yaml"
CONFLICTS_FILENAME = "conflicts.json"


def settings_path_for(directory: Path) -> Path:
    """Settings file of a workspace root or workspace folder."""
    return Path(directory) / SETTINGS_DIRNAME / SETTINGS_FILENAME


class ConfigurationManager:
    """Manages settings file discovery, validation and environment variable integration."""

    def __init__(self, config_home: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ
        self.config_home = Path(config_home) if config_home else EnvironmentVariables.config_home(self.environ)
        self.yaml_parser = ConfigurationYAMLParser()

    @property
    def global_settings_path(self) -> Path:
        return self.config_home / SETTINGS_FILENAME

    @property
    def conflicts_record_path(self) -> Path:
        return self.config_home / CONFLICTS_FILENAME

    def load_store(self,
                   workspace_root: Optional[Path] = None,
                   folder: Optional[Path] = None,
                   config_file: Optional[str] = None,
                   cli_overrides: Optional[Dict[str, Any]] = None) -> SettingsStore:
        """
        Load settings from all sources into one layered store.

        Precedence order (highest to lowest):
        1. CLI arguments (cli_overrides)
        2. Environment variables
        3. Workspace folder settings
        4. Workspace settings
        5. Global settings (or the explicit --config file)
        6. System defaults

        Language blocks ("[python]") outrank general values of every scope.

        Args:
            workspace_root: Workspace root directory, if any
            folder: Workspace folder containing the document, if any
            config_file: Explicit settings file used as the global scope
            cli_overrides: Dictionary of CLI argument overrides

        Returns:
            SettingsStore: Layered settings

        Raises:
            SettingsError: If a settings file contains invalid YAML or values
        """
        global_path = Path(config_file).expanduser() if config_file else self.global_settings_path
        if config_file and not global_path.exists():
            raise SettingsError(f"Settings file not found: {global_path}", path=str(global_path))

        layers = [self.load_layer(SettingsScope.GLOBAL, global_path)]

        if workspace_root is not None:
            layers.append(self.load_layer(SettingsScope.WORKSPACE, settings_path_for(workspace_root)))
            if folder is not None and Path(folder).resolve() != Path(workspace_root).resolve():
                layers.append(self.load_layer(SettingsScope.WORKSPACE_FOLDER, settings_path_for(folder)))

        env_warnings, env_errors = EnvironmentVariables.validate_environment_setup(self.environ)
        for message in env_warnings:
            logger.warning(message)
        for message in env_errors:
            logger.warning(f"{message}; ignored")

        overrides = self._merge_configs(
            EnvironmentVariables.settings_overrides(self.environ),
            cli_overrides or {},
        )

        for layer in layers:
            logger.debug(f"{layer.scope.label} settings: {layer.path} ({'found' if layer.existed else 'absent'})")
        if overrides:
            logger.debug(f"Settings overrides: {overrides}")

        return SettingsStore(layers, defaults=default_settings(), overrides=overrides)

    def load_layer(self, scope: SettingsScope, path: Path) -> SettingsLayer:
        """Load one scope's settings file; a missing file is an empty layer."""
        path = Path(path)
        if not path.exists():
            return SettingsLayer(scope=scope, values={}, path=path, existed=False)
        return SettingsLayer(scope=scope, values=self._load_yaml_file(path), path=path, existed=True)

    def substitute_environment_variables(self, value: Any) -> Any:
        """
        Substitute ${VAR} and ${VAR:-default} syntax with environment variable values.

        Used on formatter command lines, never on values written back to disk.

        Raises:
            SettingsError: If a required environment variable is missing
        """
        pattern = r'\$\{([^}]+)\}'

        def replace_var(match):
            var_expr = match.group(1)
            if ':-' in var_expr:
                var_name, default_value = var_expr.split(':-', 1)
                return self.environ.get(var_name, default_value)
            if var_expr not in self.environ:
                raise SettingsError(f"Required environment variable '{var_expr}' is not set")
            return self.environ[var_expr]

        if isinstance(value, dict):
            return {k: self.substitute_environment_variables(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self.substitute_environment_variables(item) for item in value]
        if isinstance(value, str):
            return re.sub(pattern, replace_var, value)
        return value

    def generate_template(self, scope: SettingsScope = SettingsScope.WORKSPACE) -> str:
        """Generate a commented settings template."""
        header = "# Multi Formatter settings ({} scope)\n".format(scope.label)
        return header + _TEMPLATE

    def write_template(self, path: Path, scope: SettingsScope, force: bool = False) -> Path:
        """Write the settings template to path.

        Raises:
            SettingsError: If the file exists and force is not set, or cannot be written
        """
        path = Path(path)
        if path.exists() and not force:
            raise SettingsError(f"Settings file already exists: {path} (use --force to overwrite)", path=str(path))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.generate_template(scope), encoding="utf-8")
        except OSError as e:
            raise SettingsError(f"Failed to write settings file {path}: {e}", path=str(path), original_error=e) from e
        logger.info(f"Wrote settings template to {path}")
        return path

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load and parse a YAML settings file with enhanced error reporting."""
        try:
            config_dict, validation_errors = self.yaml_parser.validate_and_parse_file(file_path)
        except YAMLParsingError as e:
            # Message already carries the file path and line info
            raise SettingsError(str(e), path=str(file_path), original_error=e) from e

        if validation_errors:
            error_msg = f"Settings validation errors in {file_path}:\n" + \
                        "\n".join(f"  - {error}" for error in validation_errors)
            raise SettingsError(error_msg, path=str(file_path))

        return config_dict

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result


_TEMPLATE = """\
# Keys may be written flat (editor.formatOnSave: true) or nested
# (editor: {formatOnSave: true}). "[language]" blocks override the
# general values for one language.

# Languages Multi Formatter handles (empty list: all languages)
multiformatter.languages: []

# Formatters to run, in order, when no language block says otherwise
multiformatter.formatters: []

# Milliseconds to wait around each formatter (0-5000)
multiformatter.formatterDelay: 300

# Save after every formatter instead of once at the end
multiformatter.saveAfterEachFormatter: true

# Warn when a language's default formatter also runs on save
multiformatter.showFormattingConflictWarnings: true

multiformatter.debugMode: false

# External formatters: id -> command line. The document text is sent on
# stdin and the formatted text is read from stdout. {file} is replaced
# with the document path; ${VAR} with an environment variable.
multiformatter.commands: {}
#   black: black --quiet -
#   isort: isort -

# Example language block
# "[python]":
#   editor.defaultFormatter: multiformatter
#   multiformatter.formatters:
#     - isort
#     - black
#     - builtin.trimTrailingWhitespace
"""
