"""Tests for package loading and source discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from callslice.errors import PackageLoadError
from callslice.semantic import PackageLoader, load_path_filter, resolve_source_root
from callslice.semantic.scanner import IgnoreRule, iter_source_files
from tests._fixtures.project_builder import ProjectBuilder


def test_loader_groups_modules_by_package(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "app/__init__.py": "",
            "app/main.py": "def run():\n    pass\n",
            "app/util/__init__.py": "",
            "app/util/text.py": "def clean():\n    pass\n",
            "script.py": "def main():\n    pass\n",
        }
    )

    project = project_builder.load()

    assert [package.path for package in project.packages] == ["app", "app.util", "script"]
    app = project.package("app")
    assert app is not None
    assert sorted(unit.module for unit in app.units) == ["app", "app.main"]
    assert project.units["app.util.text"].declarations[0].qualname == "clean"
    assert project.units["app"].is_package_init


def test_loader_skips_non_importable_paths(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "app/__init__.py": "",
            "app/my-script.py": "def run():\n    pass\n",
            "docs/conf.d/extra.py": "x = 1\n",
        }
    )

    project = project_builder.load()

    assert "app" in project.units
    assert not any("script" in module for module in project.units)
    assert not any(module.startswith("docs") for module in project.units)


def test_loader_raises_when_nothing_found(project_builder: ProjectBuilder) -> None:
    project_builder.write({"README.md": "# nothing\n"})

    with pytest.raises(PackageLoadError, match="No Python packages"):
        project_builder.load()


def test_loader_raises_for_missing_source_root(tmp_path: Path) -> None:
    with pytest.raises(PackageLoadError, match="not a directory"):
        PackageLoader().load(tmp_path / "missing")


def test_loader_keeps_files_with_syntax_errors(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "app/__init__.py": """
            def run():
                return 1


            def broken(:
            """,
        }
    )

    project = project_builder.load()

    assert project.units["app"].tree.root_node.has_error
    assert [package.path for package in project.packages] == ["app"]


def test_project_has_module_includes_namespace_prefixes(project_builder: ProjectBuilder) -> None:
    project_builder.write({"ns/inner/mod.py": "def run():\n    pass\n"})

    project = project_builder.load()

    assert project.has_module("ns.inner.mod")
    assert project.has_module("ns")
    assert not project.has_module("ns.other")


def test_resolve_source_root_prefers_src_layout(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/app/__init__.py": ""})
    root = project_builder.path()

    assert resolve_source_root(root, "app.core") == root / "src"
    assert resolve_source_root(root, "other") == root
    assert resolve_source_root(root, "app", configured=root / "lib") == root / "lib"


def test_iter_source_files_honours_ignore_rules(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            ".gitignore": "generated/\n",
            "app/__init__.py": "",
            "app/legacy.py": "",
            "generated/app_pb2.py": "",
            ".venv/lib/site.py": "",
            "notes.txt": "",
        }
    )
    root = project_builder.path().resolve()
    path_filter = load_path_filter(root, ["app/legacy.py"])

    files = [path.relative_to(root).as_posix() for path in iter_source_files(root, path_filter)]

    assert files == ["app/__init__.py"]


def test_ignore_rules_are_relative_to_the_project_root_in_src_layout(
    project_builder: ProjectBuilder,
) -> None:
    project_builder.write(
        {
            ".gitignore": "/src/app/generated/\n*_pb2.py\n",
            "src/app/__init__.py": "",
            "src/app/generated/__init__.py": "",
            "src/app/generated/gen.py": "",
            "src/app/proto/msg_pb2.py": "",
            "src/app/legacy/old.py": "",
            "src/app/legacy/keep.py": "",
        }
    )
    root = project_builder.path().resolve()
    path_filter = load_path_filter(root, ["src/app/legacy/old.py"])

    files = [
        path.relative_to(root / "src").as_posix()
        for path in iter_source_files(root / "src", path_filter)
    ]

    assert files == ["app/__init__.py", "app/legacy/keep.py"]


def test_loader_uses_the_path_filter(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "src/app/__init__.py": "",
            "src/app/generated/gen.py": "def make():\n    pass\n",
        }
    )
    root = project_builder.path()

    project = PackageLoader().load(root / "src", load_path_filter(root, ["/src/app/generated/"]))

    assert sorted(project.units) == ["app"]


def test_ignore_rule_parsing() -> None:
    assert IgnoreRule.parse("  ") is None
    assert IgnoreRule.parse("/") is None
    assert IgnoreRule.parse("build/") == IgnoreRule("build", directory_only=True)
    assert IgnoreRule.parse("/src/gen/") == IgnoreRule("src/gen", directory_only=True, anchored=True)
    assert IgnoreRule.parse("!keep.py") == IgnoreRule("keep.py", negate=True)


def test_negated_rule_reincludes_a_file(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            ".gitignore": "*.py\n!app/__init__.py\n",
            "app/__init__.py": "",
            "app/other.py": "",
        }
    )
    root = project_builder.path().resolve()

    files = [path.relative_to(root).as_posix() for path in iter_source_files(root, load_path_filter(root))]

    assert files == ["app/__init__.py"]
