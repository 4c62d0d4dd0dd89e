"""Tests for the scoped working-directory helper."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from callslice.errors import WorkingDirectoryError
from callslice.workdir import working_directory


def test_working_directory_changes_and_restores(tmp_path: Path) -> None:
    before = Path.cwd()
    target = tmp_path / "inner"
    target.mkdir()

    with working_directory(target) as current:
        assert current == target.resolve()
        assert Path.cwd() == target.resolve()

    assert Path.cwd() == before


def test_working_directory_restores_on_error(tmp_path: Path) -> None:
    before = Path.cwd()

    with pytest.raises(ValueError):
        with working_directory(tmp_path):
            raise ValueError("boom")

    assert Path.cwd() == before


def test_working_directory_raises_for_missing_directory(tmp_path: Path) -> None:
    before = os.getcwd()

    with pytest.raises(WorkingDirectoryError, match="Cannot change directory"):
        with working_directory(tmp_path / "missing"):
            pass  # pragma: no cover

    assert os.getcwd() == before
