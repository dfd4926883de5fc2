"""Built-in text fixers, available without any external tool."""

import re
from typing import Callable, Dict

from multiformatter.formatters.registry import FormattingContext


_TRAILING_WHITESPACE = re.compile(r"[ \t]+(?=\r?\n|$)")


def _line_ending(text: str) -> str:
    if "\r\n" in text:
        return "\r\n"
    if "\r" in text:
        return "\r"
    return "\n"


def trim_trailing_whitespace(text: str, context: FormattingContext = None) -> str:
    return _TRAILING_WHITESPACE.sub("", text)


def insert_final_newline(text: str, context: FormattingContext = None) -> str:
    if not text or text.endswith(("\n", "\r")):
        return text
    return text + _line_ending(text)


def trim_final_newlines(text: str, context: FormattingContext = None) -> str:
    """Collapse trailing blank lines to a single line ending."""
    stripped = text.rstrip("\r\n")
    if stripped == text:
        return text
    return stripped + _line_ending(text) if stripped else ""


def normalize_line_endings(text: str, context: FormattingContext = None) -> str:
    """Convert every line ending to the document's dominant one."""
    crlf = text.count("\r\n")
    lf = text.count("\n") - crlf
    cr = text.count("\r") - crlf
    if crlf >= lf and crlf >= cr and crlf:
        target = "\r\n"
    elif cr > lf:
        target = "\r"
    else:
        target = "\n"
    unified = text.replace("\r\n", "\n").replace("\r", "\n")
    return unified if target == "\n" else unified.replace("\n", target)


BUILTIN_FORMATTERS: Dict[str, Callable[..., str]] = {
    "builtin.trimTrailingWhitespace": trim_trailing_whitespace,
    "builtin.insertFinalNewline": insert_final_newline,
    "builtin.trimFinalNewlines": trim_final_newlines,
    "builtin.normalizeLineEndings": normalize_line_endings,
}
