"""Tests for the depth-bounded call graph walker."""

from __future__ import annotations

from callslice.extraction import CallGraphWalker, build_index, default_depth
from callslice.models import SymbolId
from callslice.semantic import SemanticModel
from tests._fixtures.project_builder import ProjectBuilder


def _walker(builder: ProjectBuilder, entry_name: str):
    project = builder.load()
    index, entry = build_index(project.packages, ["app"], entry_name)
    return CallGraphWalker(index, SemanticModel(project)), entry


def _write(builder: ProjectBuilder) -> None:
    builder.write(
        {
            "app/__init__.py": """
            from app.lib.calc import total


            def run():
                return total() + local()


            def local():
                return 0
            """,
            "app/lib/__init__.py": "",
            "app/lib/calc.py": """
            def total():
                return part()


            def part():
                return 1
            """,
        }
    )


def test_walk_accumulates_source_per_package(project_builder: ProjectBuilder) -> None:
    _write(project_builder)
    walker, entry = _walker(project_builder, "run")

    result = walker.walk(entry, 5)

    assert [package.path for package in result.order] == ["app", "app.lib"]
    assert result.sources["app"] == (
        "\ndef run():\n    return total() + local()\n"
        "\ndef local():\n    return 0\n"
    )
    assert result.sources["app.lib"] == (
        "\ndef total():\n    return part()\n"
        "\ndef part():\n    return 1\n"
    )
    assert result.functions() == [
        SymbolId("app.lib.calc", "total"),
        SymbolId("app.lib.calc", "part"),
        SymbolId("app", "local"),
    ]


def test_walk_without_entry_registers_its_package_but_not_its_text(
    project_builder: ProjectBuilder,
) -> None:
    _write(project_builder)
    walker, entry = _walker(project_builder, "run")

    result = walker.walk(entry, 6, include_entry=False)

    assert [package.path for package in result.order] == ["app", "app.lib"]
    assert "def run" not in result.sources["app"]
    assert result.sources["app"] == "\ndef local():\n    return 0\n"
    assert result.visited[0] == entry


def test_zero_depth_visits_only_the_entry(project_builder: ProjectBuilder) -> None:
    _write(project_builder)
    walker, entry = _walker(project_builder, "run")

    result = walker.walk(entry, 0)

    assert result.visited == [entry]
    assert result.sources == {"app": "\ndef run():\n    return total() + local()\n"}


def test_one_hop_stops_before_second_level(project_builder: ProjectBuilder) -> None:
    _write(project_builder)
    walker, entry = _walker(project_builder, "run")

    result = walker.walk(entry, 1)

    assert SymbolId("app.lib.calc", "part") not in result.visited
    assert result.functions() == [SymbolId("app.lib.calc", "total"), SymbolId("app", "local")]


def test_default_depth_depends_on_entry_inclusion() -> None:
    assert default_depth(False) == 5
    assert default_depth(True) == 6
