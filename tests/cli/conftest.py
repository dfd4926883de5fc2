"""
Fixtures for CLI tests: a workspace with settings and a document.
"""

import pytest
from click.testing import CliRunner


PYTHON_WORKSPACE_SETTINGS = """\
multiformatter.formatterDelay: 0
"[python]":
  editor.defaultFormatter: multiformatter
  multiformatter.formatters:
    - builtin.trimTrailingWhitespace
    - builtin.trimFinalNewlines
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_home(tmp_path):
    """Global settings directory (MULTIFORMATTER_CONFIG_HOME set by the root conftest)."""
    home = tmp_path / "config_home"
    home.mkdir()
    return home


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Workspace root with Python settings, used as the working directory."""
    root = tmp_path / "project"
    settings_dir = root / ".multiformatter"
    settings_dir.mkdir(parents=True)
    (settings_dir / "settings.yaml").write_text(PYTHON_WORKSPACE_SETTINGS, encoding="utf-8")
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def python_file(workspace):
    path = workspace / "main.py"
    path.write_text("x = 1\n", encoding="utf-8")
    return path
