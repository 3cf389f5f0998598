"""Tests for contractweaver.models."""

from __future__ import annotations

from contractweaver.models import (
    FunctionDescriptor,
    HeaderVariant,
    Parameter,
    StructureDescriptor,
    Visibility,
)


def test_call_header_forwards_arguments_to_renamed_method() -> None:
    function = FunctionDescriptor(
        name="transfer",
        parameters=(
            Parameter("to", declaration="Account $to"),
            Parameter("amount", declaration="int $amount = 0"),
            Parameter("tags", declaration="string ...$tags", variadic=True),
        ),
    )

    assert function.render_header(HeaderVariant.CALL, "__origX") == (
        "$this->transfer__origX($to, $amount, ...$tags)"
    )


def test_call_header_uses_late_static_binding_for_static_methods() -> None:
    public = FunctionDescriptor(name="open", is_static=True)
    private = FunctionDescriptor(name="seed", is_static=True, visibility=Visibility.PRIVATE)

    assert public.render_header("call") == "static::open()"
    assert private.render_header("call") == "self::seed()"


def test_declaration_header_keeps_signature() -> None:
    function = FunctionDescriptor(
        name="find",
        visibility=Visibility.PROTECTED,
        is_static=True,
        parameters=(Parameter("id", declaration="?int $id = null"),),
        return_type="?static",
        returns_reference=True,
    )

    assert function.render_header(HeaderVariant.DECLARATION, "__orig1") == (
        "protected static function &find__orig1(?int $id = null): ?static"
    )


def test_declaration_header_drops_abstract_when_forced_concrete() -> None:
    function = FunctionDescriptor(name="label", is_abstract=True, return_type="string")

    assert function.render_header("declaration") == "abstract public function label(): string"
    assert function.render_header("declaration", force_concrete=True) == (
        "public function label(): string"
    )


def test_parameter_declaration_falls_back_to_name() -> None:
    assert Parameter("value", by_reference=True).render_declaration() == "&$value"
    assert Parameter("rest", variadic=True).render_declaration() == "...$rest"


def test_function_flags() -> None:
    assert FunctionDescriptor(name="__CONSTRUCT").is_constructor is True
    assert FunctionDescriptor(name="run", return_type="void").returns_void is True
    assert FunctionDescriptor(name="halt", return_type="never").returns_void is True
    assert FunctionDescriptor(name="get", return_type="?int").returns_void is False
    assert FunctionDescriptor(name="hide", visibility=Visibility.PRIVATE).is_private is True


def test_structure_lookup_and_short_name() -> None:
    withdraw = FunctionDescriptor(name="withdraw")
    structure = StructureDescriptor(
        qualified_name="Bank\\Account",
        path="/src/Account.php",
        functions={"withdraw": withdraw},
    )

    assert structure.get_function("withdraw") is withdraw
    assert structure.get_function("deposit") is None
    assert structure.short_name == "Account"
