"""Tests for declaration discovery in parsed sources."""

from __future__ import annotations

import textwrap

from callslice.semantic import SourceParser
from callslice.semantic.parser import collect_declarations, decorator_names, node_text


def _declarations(source: str):
    data = textwrap.dedent(source).lstrip("\n").encode("utf-8")
    tree = SourceParser().parse(data)
    return data, collect_declarations(tree, data, "pkg.mod")


def test_collects_functions_and_methods_in_source_order() -> None:
    _, declarations = _declarations(
        """
        def first():
            def nested():
                pass
            return nested()


        class Outer:
            def method(self):
                pass

            class Inner:
                async def deep(self):
                    pass


        if True:
            def conditional():
                pass
        """
    )

    assert [declaration.qualname for declaration in declarations] == [
        "first",
        "Outer.method",
        "Outer.Inner.deep",
        "conditional",
    ]
    method = declarations[1]
    assert method.owner_class == "Outer"
    assert method.name == "method"
    assert str(method.symbol) == "pkg.mod:Outer.method"
    assert declarations[0].owner_class is None


def test_decorated_definitions_keep_the_decorators() -> None:
    data, declarations = _declarations(
        """
        class Service:
            @staticmethod
            @cached(size=3)
            def build():
                pass
        """
    )

    declaration = declarations[0]
    assert declaration.definition.type == "decorated_definition"
    assert declaration.function.type == "function_definition"
    assert decorator_names(declaration.definition, data) == ["staticmethod", "cached"]


def test_doc_comments_are_the_comment_lines_directly_above() -> None:
    data, declarations = _declarations(
        """
        # detached

        # attached one
        # attached two
        def run():
            pass

        x = 1  # trailing
        def after():
            pass
        """
    )

    run, after = declarations
    assert [node_text(comment, data) for comment in run.doc_comments] == [
        "# attached one",
        "# attached two",
    ]
    assert after.doc_comments == []


def test_stub_bodies_are_detected() -> None:
    _, declarations = _declarations(
        '''
        def ellipsis_only(): ...


        def documented_stub():
            """Docs."""
            ...


        def docstring_only():
            """Docs."""


        def passes():
            pass


        def real():
            return 1
        '''
    )

    has_body = {declaration.qualname: declaration.has_body for declaration in declarations}
    assert has_body == {
        "ellipsis_only": False,
        "documented_stub": False,
        "docstring_only": True,
        "passes": True,
        "real": True,
    }
    assert declarations[0].body is None
    assert declarations[-1].body is not None
