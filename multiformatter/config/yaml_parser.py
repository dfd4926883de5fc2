"""
YAML parser with validation for Multi Formatter settings files.

This module provides YAML parsing with detailed error reporting, line number
information, and structure validation for settings files. Both flat
("editor.defaultFormatter: black") and nested ("editor: {defaultFormatter: black}")
spellings are validated, inside and outside "[language]" blocks.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

from .schema import (
    KEY_COMMANDS,
    KEY_CONFLICT_WARNINGS,
    KEY_DEBUG_MODE,
    KEY_DEFAULT_FORMATTER,
    KEY_FORMAT_ON_SAVE,
    KEY_FORMATTER_DELAY,
    KEY_FORMATTERS,
    KEY_LANGUAGE_FAMILIES,
    KEY_LANGUAGES,
    KEY_SAVE_AFTER_EACH,
    parse_language_block_key,
)


class YAMLParsingError(Exception):
    """Custom exception for YAML parsing errors with enhanced context."""

    def __init__(self, message: str, file_path: Optional[Path] = None,
                 line_number: Optional[int] = None, column: Optional[int] = None):
        self.file_path = file_path
        self.line_number = line_number
        self.column = column

        error_parts = [message]

        if file_path:
            error_parts.append(f"File: {file_path}")

        if line_number is not None:
            if column is not None:
                error_parts.append(f"Line {line_number}, Column {column}")
            else:
                error_parts.append(f"Line {line_number}")

        super().__init__(" | ".join(error_parts))


# Expected value type per known key
_KEY_TYPES = {
    KEY_LANGUAGES: "string_list",
    KEY_FORMATTERS: "string_list",
    KEY_FORMATTER_DELAY: "number",
    KEY_SAVE_AFTER_EACH: "bool",
    KEY_CONFLICT_WARNINGS: "bool",
    KEY_DEBUG_MODE: "bool",
    KEY_COMMANDS: "string_map",
    KEY_LANGUAGE_FAMILIES: "string_map",
    KEY_DEFAULT_FORMATTER: "optional_string",
    KEY_FORMAT_ON_SAVE: "bool",
}

# Keys that make sense inside a language block
_LANGUAGE_KEYS = {
    KEY_FORMATTERS,
    KEY_DEFAULT_FORMATTER,
    KEY_FORMAT_ON_SAVE,
    KEY_FORMATTER_DELAY,
    KEY_SAVE_AFTER_EACH,
}


def _mark_position(error: yaml.YAMLError) -> Tuple[Optional[int], Optional[int]]:
    mark = getattr(error, "problem_mark", None)
    if mark is None:
        return None, None
    # YAML marks are 0-based
    return mark.line + 1, mark.column + 1


def _describe(error: yaml.YAMLError) -> str:
    problem = getattr(error, "problem", None)
    if problem:
        return f"YAML parsing error: {problem}"
    return f"YAML parsing error: {error}"


def flatten_keys(section: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten one level of nesting: {"editor": {"formatOnSave": True}} -> {"editor.formatOnSave": True}."""
    flat: Dict[str, Any] = {}
    for key, value in section.items():
        key = str(key)
        if "." not in key and isinstance(value, dict) and not parse_language_block_key(key):
            for name, nested in value.items():
                flat[f"{key}.{name}"] = nested
        else:
            flat[key] = value
    return flat


class ConfigurationYAMLParser:
    """YAML parser for settings files with validation and error reporting."""

    def __init__(self):
        self.loader = yaml.SafeLoader

    def parse_file(self, file_path: Path) -> Dict[str, Any]:
        """
        Parse a YAML settings file with enhanced error reporting.

        Args:
            file_path: Path to YAML settings file

        Returns:
            Dictionary containing parsed settings

        Raises:
            YAMLParsingError: If YAML is invalid or file cannot be read
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = yaml.load(f, Loader=self.loader)
        except yaml.YAMLError as e:
            line_number, column = _mark_position(e)
            raise YAMLParsingError(_describe(e), file_path, line_number, column)
        except FileNotFoundError:
            raise YAMLParsingError("Settings file not found", file_path)
        except PermissionError:
            raise YAMLParsingError("Permission denied reading settings file", file_path)
        except UnicodeDecodeError as e:
            raise YAMLParsingError(f"File encoding error: {e}", file_path)
        except OSError as e:
            raise YAMLParsingError(f"Unexpected error reading settings file: {e}", file_path)

        return self._ensure_mapping(content, file_path)

    def _ensure_mapping(self, content: Any, file_path: Optional[Path]) -> Dict[str, Any]:
        if content is None:
            return {}
        if not isinstance(content, dict):
            raise YAMLParsingError(
                f"Settings must be a mapping, got {type(content).__name__}", file_path
            )
        return content

    def validate_configuration_structure(self, config_dict: Dict[str, Any]) -> List[str]:
        """
        Validate the value types of known settings keys.

        Unknown keys are allowed, since settings files are shared with
        the host editor, but a "multiformatter." key that is not known is
        reported as a likely typo.

        Args:
            config_dict: Settings dictionary to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        for key, value in flatten_keys(config_dict).items():
            languages = parse_language_block_key(key)
            if languages:
                errors.extend(self._validate_language_block(key, value))
                continue
            errors.extend(self._validate_value(key, value))

        return errors

    def _validate_language_block(self, block_key: str, block: Any) -> List[str]:
        """Validate one "[language]" block."""
        errors = []

        if not isinstance(block, dict):
            errors.append(f"{block_key} must be a dictionary")
            return errors

        for key, value in flatten_keys(block).items():
            if key in _KEY_TYPES and key not in _LANGUAGE_KEYS:
                errors.append(f"{block_key}: {key} cannot be set per language")
                continue
            errors.extend(self._validate_value(key, value, prefix=f"{block_key}: "))

        return errors

    def _validate_value(self, key: str, value: Any, prefix: str = "") -> List[str]:
        expected = _KEY_TYPES.get(key)
        if expected is None:
            if key.startswith("multiformatter."):
                return [f"{prefix}Unknown setting: {key}"]
            return []

        if expected == "string_list":
            if isinstance(value, str):
                return []
            if not isinstance(value, list):
                return [f"{prefix}{key} must be a list of formatter/language ids"]
            if not all(isinstance(item, str) for item in value):
                return [f"{prefix}{key} must only contain strings"]
        elif expected == "number":
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return [f"{prefix}{key} must be a number of milliseconds"]
        elif expected == "bool":
            if not isinstance(value, bool):
                return [f"{prefix}{key} must be true or false"]
        elif expected == "optional_string":
            if value is not None and not isinstance(value, str):
                return [f"{prefix}{key} must be a formatter id"]
        elif expected == "string_map":
            if not isinstance(value, dict):
                return [f"{prefix}{key} must be a mapping"]
            if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
                return [f"{prefix}{key} must map strings to strings"]

        return []

    def serialize_to_yaml(self, settings: Dict[str, Any]) -> str:
        """Serialize a settings mapping to YAML, keeping key order."""
        return yaml.safe_dump(settings, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def validate_and_parse_file(self, file_path: Path) -> Tuple[Dict[str, Any], List[str]]:
        """
        Parse and validate a YAML settings file in one step.

        Returns:
            Tuple of (parsed_settings, validation_errors)

        Raises:
            YAMLParsingError: If YAML parsing fails
        """
        config_dict = self.parse_file(file_path)
        validation_errors = self.validate_configuration_structure(config_dict)
        return config_dict, validation_errors
