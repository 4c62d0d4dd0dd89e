"""Tests for project membership parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from callslice.errors import ManifestUnreadableError
from callslice.manifest import is_member, load_membership, normalise_package_name
from tests._fixtures.project_builder import ProjectBuilder


def test_normalise_package_name_maps_distribution_to_import_name() -> None:
    assert normalise_package_name("My-Project.Tools") == "my_project_tools"
    assert normalise_package_name("plain") == "plain"


def test_load_membership_uses_project_name(project_builder: ProjectBuilder) -> None:
    project_builder.manifest(name="data-pipeline")

    assert load_membership(project_builder.path()) == ["data_pipeline"]


def test_load_membership_falls_back_to_poetry_name(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "pyproject.toml": """
            [tool.poetry]
            name = "poetry-app"
            """,
        }
    )

    assert load_membership(project_builder.path()) == ["poetry_app"]


def test_load_membership_orders_override_setuptools_and_extras(
    project_builder: ProjectBuilder,
) -> None:
    project_builder.manifest(
        name="app",
        extra="""
        [tool.setuptools]
        packages = ["app", "shared"]
        """,
    )

    prefixes = load_membership(project_builder.path(), package="app.core", extra=["plugins", "shared"])

    assert prefixes == ["app.core", "app", "shared", "plugins"]


def test_load_membership_ignores_find_tables(project_builder: ProjectBuilder) -> None:
    project_builder.manifest(
        name="app",
        extra="""
        [tool.setuptools.packages.find]
        include = ["app*"]
        """,
    )

    assert load_membership(project_builder.path()) == ["app"]


def test_load_membership_raises_when_manifest_missing(tmp_path: Path) -> None:
    with pytest.raises(ManifestUnreadableError) as excinfo:
        load_membership(tmp_path)

    assert excinfo.value.path == tmp_path / "pyproject.toml"


def test_load_membership_raises_on_invalid_toml(project_builder: ProjectBuilder) -> None:
    project_builder.write({"pyproject.toml": "[project\nname = \n"})

    with pytest.raises(ManifestUnreadableError, match="invalid TOML"):
        load_membership(project_builder.path())


def test_load_membership_requires_a_primary_package(project_builder: ProjectBuilder) -> None:
    project_builder.write({"pyproject.toml": "[build-system]\nrequires = []\n"})

    with pytest.raises(ManifestUnreadableError, match="no \\[project\\] name"):
        load_membership(project_builder.path())


def test_is_member_matches_prefix_and_subpackages_only() -> None:
    prefixes = ["app", "shared.core"]

    assert is_member(prefixes, "app")
    assert is_member(prefixes, "app.util.text")
    assert is_member(prefixes, "shared.core.io")
    assert not is_member(prefixes, "application")
    assert not is_member(prefixes, "shared")
