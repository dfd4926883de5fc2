"""
Chain Subcommand Module

Shows which formatters would run for a document or language, in which
order, and under which options. Nothing is formatted.
"""

import sys
from typing import Optional

import click

from multiformatter.formatters.errors import SettingsError
from multiformatter.formatters.resolver import SettingsResolver
from multiformatter.host.languages import detect_language

from .help_texts import CHAIN_HELP, NO_LANGUAGE_ERROR, ExitCodes
from .runtime import load_store, report_settings_error
from .shared_options import language_option, settings_options


@click.command(help=CHAIN_HELP)
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@language_option()
@settings_options
def chain(path: Optional[str], language: Optional[str], workspace: Optional[str],
          folder: Optional[str], config: Optional[str]):
    if not path and not language:
        click.echo(f"Error: {NO_LANGUAGE_ERROR}", err=True)
        sys.exit(ExitCodes.MISSING_REQUIRED_OPTION)

    language_id = language or detect_language(path)

    try:
        store = load_store(path, workspace, folder, config)
    except SettingsError as e:
        report_settings_error(e)
        sys.exit(ExitCodes.INVALID_CONFIGURATION)

    resolver = SettingsResolver(store)
    resolved = resolver.resolve(language_id)
    options = resolver.resolve_options(language_id)

    click.echo(f"Language: {language_id}")
    if not resolver.is_language_enabled(language_id):
        click.echo("Enabled: no (not in multiformatter.languages)")
    family = resolver.family_of(language_id)
    if family:
        click.echo(f"Family: {family}")
    click.echo(f"Default formatter: {resolver.default_formatter(language_id) or 'none'}")
    click.echo(f"Chain ({resolved.source.value}): {resolved.describe()}")
    for index, step in enumerate(resolved, start=1):
        click.echo(f"  {index}. {step.formatter_id}")

    problem = resolver.validate(language_id)
    if problem:
        click.echo(f"⚠ {problem}")

    click.echo(f"Formatter delay: {options.formatter_delay_ms}ms")
    click.echo(f"Save after each formatter: {'yes' if options.save_after_each else 'no'}")
    click.echo(f"Scope written during runs: {store.narrowest_scope().label}")
