"""Rendering of walked sources into the final document."""

from __future__ import annotations

from typing import List, Mapping, Sequence

from ..models import Package

FENCE = "```"


def format_package(name: str, code_only: bool) -> str:
    if code_only:
        return f"# {name}"
    return name


def format_functions(functions: str, code_only: bool) -> str:
    if code_only:
        return functions
    return f"{FENCE}{functions}{FENCE}"


def render_document(
    order: Sequence[Package],
    sources: Mapping[str, str],
    *,
    exclude_root: bool = False,
    code_only: bool = False,
) -> str:
    """Join per-package sources in visit order.

    The first slot is printed without a package header. With `exclude_root` the
    first slot (the entry point's package) is dropped and the second slot is
    printed without a header instead. Blocks are separated by a blank line.
    """
    parts: List[str] = []
    last = len(order) - 1
    for position, package in enumerate(order):
        if position == 0 and exclude_root:
            continue
        if position > 1 or (position == 1 and not exclude_root):
            parts.append(format_package(package.path, code_only) + "\n")
        parts.append(format_functions(sources.get(package.path, ""), code_only))
        if position < last:
            parts.append("\n\n")
    return "".join(parts)


__all__ = ["FENCE", "format_functions", "format_package", "render_document"]
