"""
External command formatter backend.

Runs a formatter as a subprocess: the document text goes to stdin and
the formatted text is read from stdout. Command lines come from
multiformatter.commands, e.g.

    multiformatter.commands:
      black: black --quiet -
      prettier: npx prettier --stdin-filepath {file}
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from multiformatter.formatters.errors import (
    FormatterExecutionError,
    FormatterNotFoundError,
    FormatterTimeoutError,
)
from multiformatter.formatters.registry import FormattingContext


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
FILE_PLACEHOLDER = "{file}"


class CommandFormatter:
    """Formats text by piping it through an external command.

    Attributes:
        formatter_id: Id the command is registered under
        argv: Command and arguments; "{file}" is replaced with the document path
        timeout: Seconds before the process is killed
        cwd: Working directory (defaults to the document's directory)
    """

    def __init__(self, formatter_id: str, command: Union[str, Sequence[str]],
                 timeout: float = DEFAULT_TIMEOUT_SECONDS, cwd: Optional[Path] = None,
                 encoding: str = "utf-8"):
        self.formatter_id = formatter_id
        self.argv: List[str] = shlex.split(command, posix=(os.name != "nt")) if isinstance(command, str) else list(command)
        if not self.argv:
            raise ValueError(f"Empty command for formatter {formatter_id}")
        self.timeout = timeout
        self.cwd = cwd
        self.encoding = encoding

    def build_argv(self, context: FormattingContext) -> List[str]:
        file_arg = str(context.path) if context.path else context.uri
        return [arg.replace(FILE_PLACEHOLDER, file_arg) for arg in self.argv]

    def format(self, text: str, context: FormattingContext) -> str:
        argv = self.build_argv(context)
        cwd = self.cwd
        if cwd is None and context.path is not None and context.path.parent.is_dir():
            cwd = context.path.parent

        logger.debug(f"Running {self.formatter_id}: {' '.join(argv)}")

        try:
            completed = subprocess.run(
                argv,
                input=text.encode(self.encoding),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise FormatterNotFoundError(
                f"Executable for formatter '{self.formatter_id}' not found: {argv[0]}",
                formatter_id=self.formatter_id,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise FormatterTimeoutError(
                f"Formatter '{self.formatter_id}' timed out after {self.timeout:g}s",
                formatter_id=self.formatter_id,
                timeout=self.timeout,
            ) from e
        except OSError as e:
            raise FormatterExecutionError(
                f"Failed to start formatter '{self.formatter_id}': {e}",
                formatter_id=self.formatter_id,
                original_error=e,
            ) from e

        stderr = completed.stderr.decode(self.encoding, errors="replace").strip()
        if completed.returncode != 0:
            raise FormatterExecutionError(
                f"Formatter '{self.formatter_id}' exited with code {completed.returncode}"
                + (f": {stderr}" if stderr else ""),
                formatter_id=self.formatter_id,
                exit_code=completed.returncode,
                stderr=stderr or None,
            )
        if stderr:
            logger.debug(f"{self.formatter_id} stderr: {stderr}")

        try:
            return completed.stdout.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise FormatterExecutionError(
                f"Formatter '{self.formatter_id}' produced output that is not {self.encoding}",
                formatter_id=self.formatter_id,
                original_error=e,
            ) from e

    def __repr__(self) -> str:
        return f"CommandFormatter({self.formatter_id!r}, {self.argv!r})"
