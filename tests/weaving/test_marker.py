"""Tests for the join-point marking pass."""

from __future__ import annotations

from contractweaver.placeholders import Placeholder, find_placeholders
from contractweaver.weaving.marker import JoinPointMarker

SH = Placeholder.STRUCTURE_HEADER.render()
SB = Placeholder.STRUCTURE_BEGIN.render()
FH = Placeholder.FUNCTION_HEADER.render()
FB = Placeholder.FUNCTION_BEGIN.render()


def test_marks_structure_and_function_headers_around_opening_braces() -> None:
    source = "<?php\nclass A extends B\n{\n    public function f($x) {\n        return $x;\n    }\n}\n"

    marked = JoinPointMarker().mark(source)

    assert marked == (
        f"<?php\nclass A extends B\n{SH}{{{SB}\n"
        f"    public function f($x) {FH}{{{FB}\n        return $x;\n    }}\n}}\n"
    )


def test_bodiless_declarations_are_left_unmarked() -> None:
    source = "<?php abstract class A { abstract function f(); function g() {} }"

    marked = JoinPointMarker().mark(source)

    assert marked.count(FH) == 1
    assert marked.count(FB) == 1
    assert "abstract function f();" in marked
    assert f"function g() {FH}{{{FB}}}" in marked


def test_traits_are_marked_and_lookalikes_are_not() -> None:
    source = (
        "<?php trait Loggable { }\n"
        "$name = Loggable::class;\n"
        "$anon = new class { };\n"
        "$text = 'class Fake { function nope() {} }';\n"
        "// class Commented {\n"
        "$closure = function () { };\n"
    )

    marked = JoinPointMarker().mark(source)

    assert marked.count(SH) == 1
    assert marked.count(SB) == 1
    assert marked.count(FH) == 0
    assert f"trait Loggable {SH}{{{SB} }}" in marked


def test_marks_every_structure_in_the_file() -> None:
    source = "<?php class A { function a() {} }\nclass B { function b() {} }\n"

    marked = JoinPointMarker().mark(source)

    assert len(find_placeholders(marked, Placeholder.STRUCTURE_HEADER)) == 2
    assert len(find_placeholders(marked, Placeholder.FUNCTION_BEGIN)) == 2


def test_inline_html_is_untouched() -> None:
    source = "<p>class Html { }</p>"

    assert JoinPointMarker().mark(source) == source
