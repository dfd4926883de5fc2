"""
Documents the pipeline formats.

A document has live text (what formatters see and change) and persisted
text (what was last saved). It is dirty while the two differ.
"""

import logging
from pathlib import Path
from typing import Optional, Union


logger = logging.getLogger(__name__)


class TextDocument:
    """In-memory document.

    Attributes:
        language_id: Language the document is written in
        uri: Identifier used in logs and reports
        version: Incremented on every text change
    """

    def __init__(self, text: str = "", language_id: str = "plaintext",
                 uri: str = "untitled:document", persisted_text: Optional[str] = None):
        self._text = text
        self._persisted = text if persisted_text is None else persisted_text
        self.language_id = language_id
        self.uri = uri
        self.version = 1
        self.save_count = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def persisted_text(self) -> str:
        return self._persisted

    @property
    def is_dirty(self) -> bool:
        return self._text != self._persisted

    @property
    def path(self) -> Optional[Path]:
        return None

    def replace_text(self, text: str) -> bool:
        """Replace the live text; returns whether it changed."""
        if text == self._text:
            return False
        self._text = text
        self.version += 1
        return True

    def save(self) -> None:
        self._write(self._text)
        self._persisted = self._text
        self.save_count += 1
        logger.debug(f"Saved {self.uri}")

    def _write(self, text: str) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.uri!r}, language_id={self.language_id!r}, dirty={self.is_dirty})"


class FileDocument(TextDocument):
    """Document backed by a file on disk.

    The persisted text is the file's content (empty when the file does
    not exist yet). An unsaved buffer, when given, is the live text. With
    persist=False, saving only marks the text as saved and leaves the file
    alone.
    """

    def __init__(self, path: Union[str, Path], language_id: str = "plaintext",
                 buffer: Optional[str] = None, encoding: str = "utf-8",
                 persist: bool = True):
        self._path = Path(path)
        self.encoding = encoding
        self.persist = persist
        persisted = self._read()
        super().__init__(
            text=persisted if buffer is None else buffer,
            language_id=language_id,
            uri=self._path.as_uri() if self._path.is_absolute() else str(self._path),
            persisted_text=persisted,
        )

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> str:
        if not self._path.exists():
            return ""
        # newline="" keeps line endings as they are on disk
        with open(self._path, "r", encoding=self.encoding, newline="") as f:
            return f.read()

    def _write(self, text: str) -> None:
        if not self.persist:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding=self.encoding, newline="") as f:
            f.write(text)
