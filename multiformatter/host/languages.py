"""Language detection from file names."""

from pathlib import Path
from typing import Dict, List, Union

PLAINTEXT = "plaintext"

# Languages the orchestrator registers for when nothing is configured
DEFAULT_LANGUAGES: List[str] = [
    "javascript",
    "typescript",
    "javascriptreact",
    "typescriptreact",
    "json",
    "html",
    "css",
    "scss",
    "less",
    "php",
    "ruby",
    "erb",
    "python",
]

EXTENSION_LANGUAGES: Dict[str, str] = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescriptreact",
    ".json": "json",
    ".jsonc": "jsonc",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".less": "less",
    ".php": "php",
    ".rb": "ruby",
    ".erb": "erb",
    ".py": "python",
    ".pyi": "python",
    ".md": "markdown",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".sh": "shellscript",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".xml": "xml",
    ".sql": "sql",
    ".txt": PLAINTEXT,
}

FILENAME_LANGUAGES: Dict[str, str] = {
    "Gemfile": "ruby",
    "Rakefile": "ruby",
    "Dockerfile": "dockerfile",
    "Makefile": "makefile",
    ".babelrc": "json",
    ".prettierrc": "json",
}


def detect_language(path: Union[str, Path]) -> str:
    """Language id for a file name, "plaintext" when unknown."""
    path = Path(path)
    if path.name in FILENAME_LANGUAGES:
        return FILENAME_LANGUAGES[path.name]
    return EXTENSION_LANGUAGES.get(path.suffix.lower(), PLAINTEXT)
