"""
Service construction for CLI commands.

Every command resolves the same things from its options: the workspace
and folder a path belongs to, the layered settings for them, the
formatter backends, and the persisted conflict record.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click

from multiformatter.config.manager import ConfigurationManager
from multiformatter.config.schema import KEY_FORMATTER_DELAY, KEY_SAVE_AFTER_EACH
from multiformatter.config.store import SettingsStore
from multiformatter.formatters.backends import build_registry
from multiformatter.formatters.conflicts import ConflictRecord
from multiformatter.formatters.errors import ErrorInfo, SettingsError
from multiformatter.formatters.service import MultiFormatterService
from multiformatter.host.notifications import Notifier
from multiformatter.host.workspace import Workspace

from .notifications import ClickNotifier


logger = logging.getLogger(__name__)


def report_settings_error(error: SettingsError) -> None:
    """Echo a settings error with its suggested fix."""
    info = ErrorInfo.from_exception(error)
    click.echo(f"❌ Configuration Error: {info.message}", err=True)
    if info.suggestion:
        click.echo(f"   {info.suggestion}", err=True)


def cli_overrides(delay: Optional[int] = None, save_after_each: Optional[bool] = None) -> Dict[str, Any]:
    """Settings overrides from command options."""
    overrides: Dict[str, Any] = {}
    if delay is not None:
        overrides[KEY_FORMATTER_DELAY] = delay
    if save_after_each is not None:
        overrides[KEY_SAVE_AFTER_EACH] = save_after_each
    return overrides


def load_store(path: Optional[str] = None,
               workspace: Optional[str] = None,
               folder: Optional[str] = None,
               config: Optional[str] = None,
               overrides: Optional[Dict[str, Any]] = None,
               manager: Optional[ConfigurationManager] = None) -> SettingsStore:
    """Layered settings for a document path (or the current directory).

    Raises:
        SettingsError: If a settings file is invalid
    """
    manager = manager or ConfigurationManager()
    start = Path(path) if path else Path.cwd()
    explicit_folder = Path(folder).resolve() if folder else None
    ws = Workspace.discover(
        start,
        root=workspace,
        folders=[explicit_folder] if explicit_folder else (),
        config_home=manager.config_home,
    )
    if explicit_folder is not None:
        document_folder = explicit_folder
    elif path:
        document_folder = ws.folder_for(start)
    else:
        document_folder = None

    logger.debug(f"Workspace root: {ws.root}, folder: {document_folder}")
    return manager.load_store(
        workspace_root=ws.root,
        folder=document_folder,
        config_file=config,
        cli_overrides=overrides,
    )


def build_service(path: Optional[str] = None,
                  workspace: Optional[str] = None,
                  folder: Optional[str] = None,
                  config: Optional[str] = None,
                  overrides: Optional[Dict[str, Any]] = None,
                  notifier: Optional[Notifier] = None) -> MultiFormatterService:
    """Service for one CLI invocation, not yet started.

    Raises:
        SettingsError: If a settings file is invalid
    """
    manager = ConfigurationManager()
    store = load_store(path, workspace, folder, config, overrides, manager=manager)
    registry = build_registry(store, substitute=manager.substitute_environment_variables)
    record = ConflictRecord.load(manager.conflicts_record_path)
    return MultiFormatterService(
        store,
        registry=registry,
        notifier=notifier or ClickNotifier(),
        record=record,
    )
