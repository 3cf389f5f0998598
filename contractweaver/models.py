"""Structure and function descriptors consumed by the weaver."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

CONSTRUCTOR_NAME = "__construct"

_VOID_RETURN_TYPES = {"void", "never"}


class Visibility(str, Enum):
    """PHP member visibility."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class HeaderVariant(str, Enum):
    """Renderings offered by :meth:`FunctionDescriptor.render_header`."""

    DECLARATION = "declaration"
    CALL = "call"


@dataclass(frozen=True)
class Parameter:
    """A single formal parameter of a PHP method."""

    name: str
    declaration: str = ""
    variadic: bool = False
    by_reference: bool = False

    @property
    def call_argument(self) -> str:
        return f"...${self.name}" if self.variadic else f"${self.name}"

    def render_declaration(self) -> str:
        if self.declaration:
            return self.declaration
        prefix = "&" if self.by_reference else ""
        spread = "..." if self.variadic else ""
        return f"{prefix}{spread}${self.name}"


@dataclass(frozen=True)
class FunctionDescriptor:
    """Metadata describing one method of a structure."""

    name: str
    visibility: Visibility = Visibility.PUBLIC
    is_static: bool = False
    is_abstract: bool = False
    is_accessor_hook: bool = False
    parameters: Tuple[Parameter, ...] = ()
    return_type: Optional[str] = None
    returns_reference: bool = False

    @property
    def is_private(self) -> bool:
        return self.visibility is Visibility.PRIVATE

    @property
    def is_constructor(self) -> bool:
        return self.name.lower() == CONSTRUCTOR_NAME

    @property
    def returns_void(self) -> bool:
        if not self.return_type:
            return False
        return self.return_type.strip().lower() in _VOID_RETURN_TYPES

    def render_header(
        self,
        variant: HeaderVariant | str,
        suffix: str = "",
        force_concrete: bool = False,
    ) -> str:
        """Render a declaration or a call of this method renamed by ``suffix``.

        ``force_concrete`` drops the ``abstract`` modifier from declarations.
        """
        variant = HeaderVariant(variant)
        name = f"{self.name}{suffix}"
        if variant is HeaderVariant.CALL:
            arguments = ", ".join(param.call_argument for param in self.parameters)
            if self.is_static:
                receiver = "self::" if self.is_private else "static::"
            else:
                receiver = "$this->"
            return f"{receiver}{name}({arguments})"

        modifiers = []
        if self.is_abstract and not force_concrete:
            modifiers.append("abstract")
        modifiers.append(self.visibility.value)
        if self.is_static:
            modifiers.append("static")
        reference = "&" if self.returns_reference else ""
        parameters = ", ".join(param.render_declaration() for param in self.parameters)
        header = f"{' '.join(modifiers)} function {reference}{name}({parameters})"
        if self.return_type:
            header += f": {self.return_type}"
        return header


@dataclass(frozen=True)
class StructureDescriptor:
    """Metadata describing a class, trait or interface and its methods."""

    qualified_name: str
    path: str
    kind: str = "class"
    dependencies: FrozenSet[str] = frozenset()
    functions: Dict[str, FunctionDescriptor] = field(default_factory=dict, compare=False)

    def get_function(self, name: str) -> Optional[FunctionDescriptor]:
        return self.functions.get(name)

    @property
    def short_name(self) -> str:
        return self.qualified_name.rsplit("\\", 1)[-1]


__all__ = [
    "CONSTRUCTOR_NAME",
    "FunctionDescriptor",
    "HeaderVariant",
    "Parameter",
    "StructureDescriptor",
    "Visibility",
]
