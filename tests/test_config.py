"""Tests for run config loading and validation."""

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from casualtest.config import RunConfig, load_config


@pytest.fixture()
def tmp_yaml(tmp_path):
    """Helper that writes YAML content to a temp file and returns its path."""

    def _write(content: str) -> Path:
        p = tmp_path / "casualtest.yaml"
        p.write_text(textwrap.dedent(content))
        return p

    return _write


def test_load_minimal_config(tmp_yaml, tmp_path):
    path = tmp_yaml("""\
        files:
          - checks/basic.py
    """)
    cfg = load_config(path)
    assert cfg.files == [str((tmp_path / "checks" / "basic.py").resolve())]
    assert cfg.junit is None
    assert cfg.html is None
    assert cfg.debug_log is None
    assert cfg.verbose is False


def test_relative_output_paths_resolve_against_config_dir(tmp_yaml, tmp_path):
    path = tmp_yaml("""\
        files: [a.py, /abs/b.py]
        junit: reports/junit.xml
        html: reports/report.html
        debug_log: logs/debug.log
        verbose: true
    """)
    cfg = load_config(path)
    assert cfg.files[1] == "/abs/b.py"
    assert cfg.junit == str((tmp_path / "reports" / "junit.xml").resolve())
    assert cfg.html == str((tmp_path / "reports" / "report.html").resolve())
    assert cfg.debug_log == str((tmp_path / "logs" / "debug.log").resolve())
    assert cfg.verbose is True


def test_env_variables_are_expanded(tmp_yaml, monkeypatch):
    monkeypatch.setenv("CT_REPORTS", "/var/reports")
    monkeypatch.delenv("CT_SCRIPTS", raising=False)
    path = tmp_yaml("""\
        files: ["${CT_SCRIPTS:-/scripts}/basic.py"]
        junit: "${CT_REPORTS}/junit.xml"
    """)
    cfg = load_config(path)
    assert cfg.files == ["/scripts/basic.py"]
    assert cfg.junit == "/var/reports/junit.xml"


def test_unset_env_variable_without_default_is_rejected(monkeypatch):
    monkeypatch.delenv("CT_MISSING", raising=False)
    with pytest.raises(ValidationError, match="CT_MISSING"):
        RunConfig(files=["a.py"], junit="${CT_MISSING}/junit.xml")


def test_files_must_not_be_empty():
    with pytest.raises(ValidationError, match="files must not be empty"):
        RunConfig(files=[])


def test_files_are_required():
    with pytest.raises(ValidationError):
        RunConfig()


def test_unknown_keys_are_rejected():
    with pytest.raises(ValidationError):
        RunConfig(files=["a.py"], pattern="test_*.py")


def test_config_must_be_a_mapping(tmp_yaml):
    path = tmp_yaml("""\
        - a.py
        - b.py
    """)
    with pytest.raises(ValueError, match="mapping"):
        load_config(path)
