"""Tests for contractweaver.placeholders."""

from __future__ import annotations

from contractweaver.placeholders import Placeholder, find_placeholders


def test_render_wraps_token_in_php_comment() -> None:
    assert Placeholder.INVARIANT.render() == "/* CONTRACTWEAVER_INVARIANT_PLACEHOLDER */"
    assert Placeholder.PRECONDITION.render("withdraw") == (
        "/* CONTRACTWEAVER_PRECONDITION_PLACEHOLDER withdraw */"
    )


def test_find_placeholders_reports_arguments_in_order() -> None:
    text = (
        Placeholder.PRECONDITION.render("withdraw")
        + "$x = 1;"
        + Placeholder.PRECONDITION.render("deposit")
        + Placeholder.INVARIANT.render()
        + Placeholder.INVARIANT.render()
    )

    assert find_placeholders(text, Placeholder.PRECONDITION) == ["withdraw", "deposit"]
    assert find_placeholders(text, Placeholder.INVARIANT) == ["", ""]
    assert find_placeholders(text, Placeholder.POSTCONDITION) == []
