"""
Conflicts Subcommand Module

Runs a conflict scan against the current settings. New conflicts and
resolutions are announced once; the record of known conflicts is kept in
the config home between runs.
"""

import sys

import click

from multiformatter.formatters.errors import SettingsError

from .help_texts import CONFLICTS_HELP, STRICT_HELP, ExitCodes
from .runtime import build_service, report_settings_error
from .shared_options import settings_options


@click.command(help=CONFLICTS_HELP)
@click.option("--strict", is_flag=True, help=STRICT_HELP)
@settings_options
def conflicts(strict: bool, workspace, folder, config):
    try:
        service = build_service(workspace=workspace, folder=folder, config=config)
    except SettingsError as e:
        report_settings_error(e)
        sys.exit(ExitCodes.INVALID_CONFIGURATION)

    try:
        service.start(scan=False)
        result = service.scan_conflicts()
    finally:
        service.shutdown()

    if result.skipped:
        click.echo("Conflict warnings are disabled (multiformatter.showFormattingConflictWarnings).")
        return

    for language_id, error in sorted(result.errors.items()):
        click.echo(f"❌ Could not check {language_id}: {error}", err=True)

    if result.active:
        click.echo(f"Active conflicts: {', '.join(result.active)}")
        if strict:
            sys.exit(ExitCodes.CONFLICTS_FOUND)
    else:
        click.echo("No formatting conflicts.")
