"""
Init Subcommand Module

Writes a commented settings template for the workspace (the current
directory, or --workspace) or for the global scope.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from multiformatter.config.manager import ConfigurationManager, settings_path_for
from multiformatter.config.schema import SettingsScope
from multiformatter.formatters.errors import SettingsError

from .help_texts import FORCE_HELP, INIT_HELP, INIT_SCOPE_HELP, ExitCodes
from .shared_options import workspace_option


@click.command(help=INIT_HELP)
@click.option(
    "--scope",
    type=click.Choice(["workspace", "global"], case_sensitive=False),
    default="workspace",
    help=INIT_SCOPE_HELP,
)
@click.option("--force", is_flag=True, help=FORCE_HELP)
@workspace_option()
def init(scope: str, force: bool, workspace: Optional[str]):
    manager = ConfigurationManager()
    if scope.lower() == "global":
        target = manager.global_settings_path
        settings_scope = SettingsScope.GLOBAL
    else:
        target = settings_path_for(Path(workspace) if workspace else Path.cwd())
        settings_scope = SettingsScope.WORKSPACE

    try:
        manager.write_template(target, settings_scope, force=force)
    except SettingsError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(ExitCodes.GENERAL_ERROR)

    click.echo(f"✅ Settings template written to {target}")
