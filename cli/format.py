"""
Format Subcommand Module

Formats one document with the chain of formatters resolved for its
language. Provides:
- format: the main command, optionally with an explicit --language
- format-selection: accepts a line range but formats the whole document
- format-<language>: derived commands with the language pinned
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from multiformatter.formatters.base import EditResult
from multiformatter.formatters.cancellation import restore_default_handler, setup_cancellation_handler
from multiformatter.formatters.errors import SettingsError
from multiformatter.formatters.schemas.run_v1 import RunReportV1
from multiformatter.host.document import FileDocument
from multiformatter.host.languages import detect_language
from multiformatter.utils.logging_config import logging_config

from .help_texts import (
    FILE_NOT_FOUND_ERROR,
    FORMAT_HELP,
    FORMAT_LANGUAGE_HELP,
    FORMAT_SELECTION_HELP,
    SELECTION_END_HELP,
    SELECTION_START_HELP,
    ExitCodes,
)
from .runtime import build_service, cli_overrides, report_settings_error
from .shared_options import format_options, language_option


logger = logging.getLogger(__name__)


def apply_log_level(log_level: Optional[str], debug: bool = False) -> None:
    """Apply --log-level / --debug on top of the configured logging."""
    if debug:
        logging_config.set_level("debug")
    elif log_level:
        logging_config.set_level(log_level)


def run_format(
    path: str,
    use_stdin: bool = False,
    write: bool = False,
    language: Optional[str] = None,
    workspace: Optional[str] = None,
    folder: Optional[str] = None,
    config: Optional[str] = None,
    delay: Optional[int] = None,
    save_after_each: Optional[bool] = None,
    report_path: Optional[str] = None,
    log_level: Optional[str] = None,
    debug: bool = False,
    selection: Optional[Tuple[int, int]] = None,
) -> EditResult:
    """Shared implementation of the format commands."""
    apply_log_level(log_level, debug)

    file_path = Path(path)
    if not use_stdin and not file_path.is_file():
        click.echo(f"❌ {FILE_NOT_FOUND_ERROR.format(path=path)}", err=True)
        sys.exit(ExitCodes.FILE_NOT_FOUND)

    language_id = language or detect_language(file_path)
    buffer = sys.stdin.read() if use_stdin else None

    try:
        service = build_service(
            path=path,
            workspace=workspace,
            folder=folder,
            config=config,
            overrides=cli_overrides(delay, save_after_each),
        )
        document = FileDocument(
            file_path,
            language_id=language_id,
            buffer=buffer,
            persist=(not use_stdin) or write,
        )
    except SettingsError as e:
        report_settings_error(e)
        sys.exit(ExitCodes.INVALID_CONFIGURATION)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"❌ Cannot read {path}: {e}", err=True)
        sys.exit(ExitCodes.GENERAL_ERROR)

    token = setup_cancellation_handler()
    try:
        with service:
            if selection is not None:
                result = service.format_selection(document, selection[0], selection[1], token=token)
            else:
                result = service.format_document(document, token=token)
    except SettingsError as e:
        report_settings_error(e)
        sys.exit(ExitCodes.INVALID_CONFIGURATION)
    finally:
        restore_default_handler()

    if use_stdin:
        click.echo(document.text, nl=False)

    if report_path:
        _write_report(report_path, result, document.uri, document.language_id)

    if result.failure is not None:
        sys.exit(ExitCodes.PIPELINE_FAILURE)
    if result.cancelled:
        sys.exit(ExitCodes.CANCELLED)
    return result


def _write_report(report_path: str, result: EditResult, uri: str, language_id: str) -> None:
    report = RunReportV1.from_result(result, document=uri, language_id=language_id)
    try:
        path = Path(report_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    except OSError as e:
        click.echo(f"❌ Failed to write report {report_path}: {e}", err=True)
        sys.exit(ExitCodes.GENERAL_ERROR)
    logger.info(f"Report saved: {report_path}")


@click.command(name="format", help=FORMAT_HELP)
@format_options
@language_option()
def format_command(**options):
    """Format a document with the configured chain of formatters.

    Examples:
        # Format an unsaved buffer piped from an editor
        multi-formatter format src/app.py --stdin < buffer.py

        # Format as another language and keep a run report
        multi-formatter format page.erb --stdin --language html --report run.json
    """
    run_format(**options)


@click.command(name="format-selection", help=FORMAT_SELECTION_HELP)
@format_options
@language_option()
@click.option("--start-line", type=click.IntRange(min=1), required=True, help=SELECTION_START_HELP)
@click.option("--end-line", type=click.IntRange(min=1), required=True, help=SELECTION_END_HELP)
def format_selection(start_line: int, end_line: int, **options):
    if end_line < start_line:
        raise click.BadParameter("--end-line must not be before --start-line")
    run_format(selection=(start_line, end_line), **options)


def make_language_command(language_id: str) -> click.Command:
    """Derived format command with the language pinned."""

    @click.command(name=f"format-{language_id}", help=FORMAT_LANGUAGE_HELP.format(language=language_id))
    @format_options
    def format_language(**options):
        run_format(language=language_id, **options)

    return format_language
