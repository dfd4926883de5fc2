"""
Workspace and workspace folders.

A workspace is a root directory with optional sub-folders; each may carry
its own .multiformatter/settings.yaml. The folder containing a document
selects the narrowest settings scope for that document.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from multiformatter.config.manager import SETTINGS_DIRNAME, settings_path_for


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.relative_to(directory)
        return True
    except ValueError:
        return False


class Workspace:
    """A workspace root and its folders."""

    def __init__(self, root: PathLike, folders: Iterable[PathLike] = ()):
        self.root = Path(root).resolve()
        self.folders: List[Path] = []
        for folder in folders:
            folder = Path(folder)
            if not folder.is_absolute():
                folder = self.root / folder
            self.folders.append(folder.resolve())

    @classmethod
    def discover(cls, start: PathLike, root: Optional[PathLike] = None,
                 folders: Iterable[PathLike] = (),
                 config_home: Optional[PathLike] = None) -> "Workspace":
        """Find the workspace for a file or directory.

        Without an explicit root, the outermost ancestor of start that has a
        settings file is the root, falling back to start's directory. The
        global settings directory (config_home) never marks a workspace.
        """
        start = Path(start).resolve()
        directory = start if start.is_dir() else start.parent
        home = Path(config_home).resolve() if config_home else None

        if root is None:
            found = None
            for candidate in [directory, *directory.parents]:
                settings_dir = candidate / SETTINGS_DIRNAME
                if home is not None and settings_dir.resolve() == home:
                    continue
                if settings_path_for(candidate).is_file():
                    found = candidate
            root = found or directory

        workspace = cls(root, folders)
        logger.debug(f"Discovered {workspace!r}")
        return workspace

    def settings_path(self) -> Path:
        return settings_path_for(self.root)

    def contains(self, path: PathLike) -> bool:
        return _is_within(Path(path).resolve(), self.root)

    def folder_for(self, path: PathLike) -> Optional[Path]:
        """Workspace folder containing path, excluding the root itself.

        Explicit folders win (deepest first); otherwise the nearest ancestor
        below the root that has a settings file.
        """
        path = Path(path).resolve()
        if not _is_within(path, self.root):
            return None

        explicit = [folder for folder in self.folders if _is_within(path, folder)]
        if explicit:
            return max(explicit, key=lambda folder: len(folder.parts))

        directory = path if path.is_dir() else path.parent
        for candidate in [directory, *directory.parents]:
            if candidate == self.root or not _is_within(candidate, self.root):
                break
            if settings_path_for(candidate).exists():
                return candidate
        return None

    def __repr__(self) -> str:
        return f"Workspace({str(self.root)!r}, folders={[str(f) for f in self.folders]!r})"
