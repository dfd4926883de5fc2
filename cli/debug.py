"""
Toggle-Debug Subcommand Module

Flips multiformatter.debugMode in the global settings, or sets it with
--on/--off.
"""

import sys
from typing import Optional

import click

from multiformatter.formatters.errors import SettingsError

from .help_texts import DEBUG_STATE_HELP, TOGGLE_DEBUG_HELP, ExitCodes
from .runtime import build_service, report_settings_error
from .shared_options import config_option


@click.command(name="toggle-debug", help=TOGGLE_DEBUG_HELP)
@click.option("--on/--off", "state", default=None, help=DEBUG_STATE_HELP)
@config_option()
def toggle_debug(state: Optional[bool], config: Optional[str]):
    try:
        service = build_service(config=config)
        service.toggle_debug(state)
    except SettingsError as e:
        report_settings_error(e)
        sys.exit(ExitCodes.INVALID_CONFIGURATION)
