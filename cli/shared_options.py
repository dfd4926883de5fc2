"""
Shared CLI Option Decorators

This module provides reusable Click decorators for common CLI options,
ensuring consistency across subcommands.
"""

import click

from .help_texts import (
    CONFIG_HELP,
    DEBUG_HELP,
    DELAY_HELP,
    FOLDER_HELP,
    LANGUAGE_HELP,
    LOG_LEVEL_HELP,
    REPORT_HELP,
    SAVE_MODE_HELP,
    STDIN_HELP,
    WORKSPACE_HELP,
    WRITE_HELP,
)


def language_option(help=None):
    """Decorator for the language override."""
    def decorator(f):
        return click.option(
            '--language', '-l',
            default=None,
            help=help or LANGUAGE_HELP
        )(f)
    return decorator


def workspace_option(help=None):
    """Decorator for the workspace root."""
    def decorator(f):
        return click.option(
            '--workspace', '-w',
            default=None,
            type=click.Path(file_okay=False),
            help=help or WORKSPACE_HELP
        )(f)
    return decorator


def folder_option(help=None):
    """Decorator for the workspace folder."""
    def decorator(f):
        return click.option(
            '--folder',
            default=None,
            type=click.Path(file_okay=False),
            help=help or FOLDER_HELP
        )(f)
    return decorator


def config_option(help=None):
    """Decorator for the global settings file."""
    def decorator(f):
        return click.option(
            '--config',
            default=None,
            type=click.Path(dir_okay=False),
            help=help or CONFIG_HELP
        )(f)
    return decorator


def delay_option(help=None):
    """Decorator for the formatter delay override."""
    def decorator(f):
        return click.option(
            '--delay',
            default=None,
            type=click.IntRange(0, 5000),
            help=help or DELAY_HELP
        )(f)
    return decorator


def save_mode_option(help=None):
    """Decorator for the save-after-each override."""
    def decorator(f):
        return click.option(
            '--save-after-each/--save-at-end',
            'save_after_each',
            default=None,
            help=help or SAVE_MODE_HELP
        )(f)
    return decorator


def log_level_option(help=None):
    """Decorator for logging level options."""
    def decorator(f):
        return click.option(
            '--log-level',
            default=None,
            type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
            help=help or LOG_LEVEL_HELP
        )(f)
    return decorator


def settings_options(f):
    """Workspace, folder and settings file options."""
    f = config_option()(f)
    f = folder_option()(f)
    f = workspace_option()(f)
    return f


def format_options(f):
    """Every option of the format commands except --language."""
    f = click.option('--debug', is_flag=True, default=False, help=DEBUG_HELP)(f)
    f = log_level_option()(f)
    f = click.option('--report', 'report_path', default=None, type=click.Path(dir_okay=False), help=REPORT_HELP)(f)
    f = save_mode_option()(f)
    f = delay_option()(f)
    f = settings_options(f)
    f = click.option('--write', is_flag=True, default=False, help=WRITE_HELP)(f)
    f = click.option('--stdin', 'use_stdin', is_flag=True, default=False, help=STDIN_HELP)(f)
    f = click.argument('path', type=click.Path(dir_okay=False))(f)
    return f
