"""Tests for the symbol index."""

from __future__ import annotations

import pytest

from callslice.errors import EntryPointNotFoundError
from callslice.extraction import build_index
from callslice.models import SymbolId
from tests._fixtures.project_builder import ProjectBuilder


def _write(builder: ProjectBuilder) -> None:
    builder.write(
        {
            "app/__init__.py": """
            def run():
                pass


            class Service:
                def run(self):
                    pass
            """,
            "app/extra.py": """
            def run():
                pass
            """,
            "app/sub/__init__.py": """
            def nested():
                pass
            """,
            "other/__init__.py": """
            def outside():
                pass
            """,
        }
    )


def test_build_index_only_covers_member_packages(project_builder: ProjectBuilder) -> None:
    _write(project_builder)
    project = project_builder.load()

    index, _ = build_index(project.packages, ["app"], "Service.run")

    assert SymbolId("app.sub", "nested") in index
    assert SymbolId("other", "outside") not in index
    assert len(index) == 4
    entry = index.get(SymbolId("app", "Service.run"))
    assert entry is not None
    assert entry.package.path == "app"
    assert entry.unit.module == "app"


def test_entry_point_is_the_last_matching_declaration(project_builder: ProjectBuilder) -> None:
    _write(project_builder)
    project = project_builder.load()

    _, entry = build_index(project.packages, ["app"], "run")

    # Units of a package are loaded in path order: app/__init__.py then app/extra.py.
    assert entry == SymbolId("app.extra", "run")


def test_entry_point_in_other_member_package_is_not_found(project_builder: ProjectBuilder) -> None:
    _write(project_builder)
    project = project_builder.load()

    with pytest.raises(EntryPointNotFoundError) as excinfo:
        build_index(project.packages, ["app", "other"], "outside")

    assert excinfo.value.package == "app"


def test_redeclared_symbols_keep_the_last_declaration(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "app/__init__.py": """
            def run():
                return 1


            def run():
                return 2
            """,
        }
    )
    project = project_builder.load()

    index, entry = build_index(project.packages, ["app"], "run")

    assert len(index) == 1
    declaration = index.get(entry).declaration  # type: ignore[union-attr]
    assert declaration.definition.start_point[0] == 4
