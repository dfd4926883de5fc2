"""
CLI Package for Multi Formatter

This package provides a modular CLI architecture using Click groups and subcommands.
Each subcommand is implemented in its own module for better maintainability and testing.

The main entry point is the main() group, which registers the fixed subcommands
and derives one format-<language> command per configured language. The cli()
function serves as the console script entry point for setup.py.
"""

import logging
import os

import click
from dotenv import load_dotenv

from multiformatter import __version__
from multiformatter.config.environment import EnvironmentVariables
from multiformatter.formatters.errors import SettingsError
from multiformatter.formatters.registry import FormatterRegistry
from multiformatter.formatters.service import MultiFormatterService
from multiformatter.host.languages import DEFAULT_LANGUAGES
from multiformatter.utils.logging_config import configure_logging

# Load environment variables from .env files
# Priority: .env.dev (if exists) overrides .env
if os.path.exists('.env.dev'):
    load_dotenv('.env.dev')
elif os.path.exists('.env'):
    load_dotenv('.env')

from .chain import chain
from .conflicts import conflicts
from .debug import toggle_debug
from .format import format_command, format_selection, make_language_command
from .init import init
from .runtime import load_store

# Configure logging when CLI package is imported
configure_logging(
    level=os.environ.get(EnvironmentVariables.LOG_LEVEL, "info"),
    log_file=os.environ.get(EnvironmentVariables.LOG_FILE),
)

logger = logging.getLogger(__name__)

LANGUAGE_COMMAND_PREFIX = "format-"


class LanguageCommandGroup(click.Group):
    """Click group that adds a format-<language> command per configured language.

    Languages come from the settings visible from the current directory:
    the allow-list plus every language with a settings block, or the
    default language list when nothing is configured.
    """

    def command_languages(self):
        try:
            store = load_store()
        except SettingsError as e:
            logger.debug(f"Cannot read settings for language commands: {e}")
            return list(DEFAULT_LANGUAGES)
        return MultiFormatterService(store, registry=FormatterRegistry()).command_languages()

    def list_commands(self, ctx):
        names = list(super().list_commands(ctx))
        for language_id in self.command_languages():
            name = f"{LANGUAGE_COMMAND_PREFIX}{language_id}"
            if name not in names:
                names.append(name)
        return sorted(names)

    def get_command(self, ctx, cmd_name):
        command = super().get_command(ctx, cmd_name)
        if command is not None:
            return command
        if cmd_name.startswith(LANGUAGE_COMMAND_PREFIX):
            language_id = cmd_name[len(LANGUAGE_COMMAND_PREFIX):]
            if language_id in self.command_languages():
                return make_language_command(language_id)
        return None


@click.group(cls=LanguageCommandGroup)
@click.version_option(version=__version__, prog_name='multi-formatter')
def main():
    """Multi Formatter CLI - Run several formatters over one document, in order.

    Each formatter in the chain resolved for the document's language runs on
    the result of the previous one, and the document gets one combined edit.
    Settings live in YAML files per scope: global, workspace and workspace folder.
    """
    pass

# Register subcommands
main.add_command(format_command)
main.add_command(format_selection)
main.add_command(chain)
main.add_command(conflicts)
main.add_command(toggle_debug)
main.add_command(init)

# Entry point for setup.py console script
def cli():
    """Console script entry point.

    This function is called when the multi-formatter command is executed
    from the command line after installation via pip.
    """
    main()
