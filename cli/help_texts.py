"""
Centralized Help Text Constants

This module provides all CLI help text constants for commands and options,
ensuring consistency across subcommands, plus the exit codes every command
uses.
"""

# Exit codes for different error types
class ExitCodes:
    SUCCESS = 0
    GENERAL_ERROR = 1
    MISSING_REQUIRED_OPTION = 2
    INVALID_CONFIGURATION = 3
    PIPELINE_FAILURE = 4
    FILE_NOT_FOUND = 6
    PERMISSION_ERROR = 7
    CONFLICTS_FOUND = 9
    CANCELLED = 130


# Command help texts
FORMAT_HELP = "Format a document with the configured chain of formatters."
FORMAT_SELECTION_HELP = (
    "Format a selection. Range formatting is not supported yet, "
    "so the whole document is formatted."
)
FORMAT_LANGUAGE_HELP = "Format a document as {language} with the configured chain of formatters."
CHAIN_HELP = "Show the formatter chain and options resolved for a document or language."
CONFLICTS_HELP = "Check for languages whose default formatter also runs on save."
TOGGLE_DEBUG_HELP = "Toggle Multi Formatter debug logging (multiformatter.debugMode)."
INIT_HELP = "Write a commented settings template."

# Option help texts - document selection
PATH_HELP = "Path of the document to format."
STDIN_HELP = (
    "Read the unsaved buffer of the document from stdin and write the formatted "
    "text to stdout. Without it, the file on disk has no unsaved changes and "
    "nothing is formatted."
)
WRITE_HELP = "With --stdin, also write the formatted text to PATH."
LANGUAGE_HELP = (
    "Language id to resolve the chain for (e.g. 'python', 'typescriptreact'). "
    "Detected from the file name when omitted."
)

# Option help texts - settings
WORKSPACE_HELP = (
    "Workspace root. Its .multiformatter/settings.yaml is the workspace scope. "
    "Defaults to the outermost ancestor with a settings file."
)
FOLDER_HELP = (
    "Workspace folder containing the document. Its .multiformatter/settings.yaml is "
    "the narrowest scope. Defaults to the nearest ancestor below the root with a settings file."
)
CONFIG_HELP = (
    "Settings file used as the global scope instead of "
    "$MULTIFORMATTER_CONFIG_HOME/settings.yaml."
)
DELAY_HELP = "Override multiformatter.formatterDelay (milliseconds, 0-5000)."
SAVE_MODE_HELP = "Override multiformatter.saveAfterEachFormatter."
REPORT_HELP = "Write a JSON run report to this path."
LOG_LEVEL_HELP = "Logging level (default: from MULTIFORMATTER_LOG_LEVEL, else INFO)."
DEBUG_HELP = "Enable debug logging for this run."

# Option help texts - other commands
SELECTION_START_HELP = "First line of the selection (1-based)."
SELECTION_END_HELP = "Last line of the selection (1-based)."
STRICT_HELP = f"Exit with code {ExitCodes.CONFLICTS_FOUND} while conflicts are active."
DEBUG_STATE_HELP = "Set debug mode on or off instead of toggling it."
INIT_SCOPE_HELP = "Write the workspace settings file or the global one."
FORCE_HELP = "Overwrite an existing settings file."

# Error messages
FILE_NOT_FOUND_ERROR = "File not found: {path}"
NO_LANGUAGE_ERROR = "Provide a PATH or --language."
