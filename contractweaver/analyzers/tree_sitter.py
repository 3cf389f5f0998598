"""Tree-sitter powered builder for PHP structure descriptors."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..errors import WeaverError
from ..logging import get_logger
from ..models import FunctionDescriptor, Parameter, StructureDescriptor, Visibility

try:  # pragma: no cover - optional dependency
    import tree_sitter_php
    from tree_sitter import Language, Parser

    TREE_SITTER_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    tree_sitter_php = None  # type: ignore[assignment]
    Language = None  # type: ignore[assignment]
    Parser = None  # type: ignore[assignment]
    TREE_SITTER_AVAILABLE = False


_STRUCTURE_KINDS = {
    "class_declaration": "class",
    "trait_declaration": "trait",
    "interface_declaration": "interface",
}

# Children that precede a parameter's own declaration and are not repeated in it.
_PARAMETER_PREFIXES = {"attribute_list", "visibility_modifier", "readonly_modifier", "comment"}
_USE_CLAUSE = re.compile(r"^\s*(?P<name>\\?[\w\\]+)(?:\s+as\s+(?P<alias>\w+))?\s*$", re.IGNORECASE)
_SELF_REFERENCES = {"self", "static", "parent"}


def php_parser() -> Parser:
    """Return a new tree-sitter parser for PHP source with inline HTML."""
    if not TREE_SITTER_AVAILABLE:
        raise WeaverError("tree-sitter and tree-sitter-php are required to parse PHP source")
    return Parser(Language(tree_sitter_php.language_php()))


class TreeSitterDefinitionBuilder:
    """Extracts class, trait and interface descriptors from PHP source."""

    def __init__(self, accessor_hooks: Sequence[str] = ("__get", "__set")) -> None:
        self._accessor_hooks = {name.lower() for name in accessor_hooks}
        self._parser: Optional[Parser] = None
        self.logger = get_logger("analyzers.tree_sitter")

    def build_file(self, path: Path) -> List[StructureDescriptor]:
        source = Path(path).read_bytes()
        return self.build(source, str(path))

    def build(self, source: str | bytes, path: str) -> List[StructureDescriptor]:
        """Return one descriptor per structure declared in ``source``."""
        source_bytes = source.encode("utf-8") if isinstance(source, str) else source
        tree = self._get_parser().parse(source_bytes)
        structures = list(self._collect(tree.root_node.children, source_bytes, path, "", {}))
        self.logger.debug("Found %d structure(s) in %s", len(structures), path)
        return structures

    def _get_parser(self) -> Parser:
        if self._parser is None:
            self._parser = php_parser()
        return self._parser

    def _collect(
        self,
        nodes: Iterable,  # type: ignore[type-arg]
        source_bytes: bytes,
        path: str,
        namespace: str,
        uses: Dict[str, str],
    ) -> Iterable[StructureDescriptor]:
        for node in nodes:
            if node.type == "namespace_definition":
                name_node = node.child_by_field_name("name")
                namespace = self._node_text(name_node, source_bytes) if name_node else ""
                uses = {}
                body = node.child_by_field_name("body")
                if body is not None:
                    yield from self._collect(body.children, source_bytes, path, namespace, uses)
            elif node.type == "namespace_use_declaration":
                uses.update(self._parse_use_declaration(self._node_text(node, source_bytes)))
            elif node.type in _STRUCTURE_KINDS:
                descriptor = self._build_structure(node, source_bytes, path, namespace, uses)
                if descriptor is not None:
                    yield descriptor

    def _build_structure(
        self, node, source_bytes: bytes, path: str, namespace: str, uses: Dict[str, str]  # type: ignore[no-untyped-def]
    ) -> Optional[StructureDescriptor]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        kind = _STRUCTURE_KINDS[node.type]
        name = self._node_text(name_node, source_bytes)
        qualified_name = f"{namespace}\\{name}" if namespace else name

        dependencies: List[str] = []
        for child in node.children:
            if child.type in ("base_clause", "class_interface_clause"):
                dependencies.extend(self._clause_names(self._node_text(child, source_bytes)))

        functions: Dict[str, FunctionDescriptor] = {}
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else []:
            if member.type == "use_declaration":
                dependencies.extend(self._trait_names(self._node_text(member, source_bytes)))
            elif member.type == "method_declaration":
                function = self._build_function(member, source_bytes, interface=kind == "interface")
                if function is not None:
                    functions[function.name] = function

        resolved = {
            self._qualify(dependency, namespace, uses)
            for dependency in dependencies
            if dependency.lower() not in _SELF_REFERENCES
        }
        return StructureDescriptor(
            qualified_name=qualified_name,
            path=path,
            kind=kind,
            dependencies=frozenset(resolved),
            functions=functions,
        )

    def _build_function(self, node, source_bytes: bytes, *, interface: bool) -> Optional[FunctionDescriptor]:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        name = self._node_text(name_node, source_bytes)

        visibility = Visibility.PUBLIC
        is_static = is_abstract = returns_reference = False
        for child in node.children:
            if child.start_byte >= name_node.start_byte:
                break
            if child.type == "visibility_modifier":
                visibility = Visibility(self._node_text(child, source_bytes).strip().lower())
            elif child.type == "static_modifier":
                is_static = True
            elif child.type == "abstract_modifier":
                is_abstract = True
            elif child.type in ("reference_modifier", "&"):
                returns_reference = True

        parameters: Tuple[Parameter, ...] = ()
        parameters_node = node.child_by_field_name("parameters")
        if parameters_node is not None:
            parameters = tuple(
                parameter
                for parameter in (
                    self._build_parameter(child, source_bytes)
                    for child in parameters_node.named_children
                    if child.type.endswith("parameter")
                )
                if parameter is not None
            )
        return_type_node = node.child_by_field_name("return_type")
        body = node.child_by_field_name("body")

        return FunctionDescriptor(
            name=name,
            visibility=visibility,
            is_static=is_static,
            is_abstract=interface or is_abstract or body is None,
            is_accessor_hook=name.lower() in self._accessor_hooks,
            parameters=parameters,
            return_type=self._node_text(return_type_node, source_bytes) if return_type_node else None,
            returns_reference=returns_reference,
        )

    def _build_parameter(self, node, source_bytes: bytes) -> Optional[Parameter]:  # type: ignore[no-untyped-def]
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        children = list(node.children)
        while children and children[0].type in _PARAMETER_PREFIXES:
            children.pop(0)
        if not children:
            return None
        child_types = {child.type for child in node.children}
        name = self._node_text(name_node, source_bytes)
        return Parameter(
            name=name.replace("&", "").strip().lstrip("$"),
            declaration=source_bytes[children[0].start_byte : node.end_byte].decode("utf-8", errors="ignore"),
            variadic=node.type == "variadic_parameter" or "..." in child_types,
            by_reference=bool(child_types & {"reference_modifier", "&"}) or name_node.type == "by_ref",
        )

    @staticmethod
    def _clause_names(text: str) -> List[str]:
        body = re.sub(r"^\s*(?:extends|implements)\b", "", text, flags=re.IGNORECASE)
        return [name.strip() for name in body.split(",") if name.strip()]

    @staticmethod
    def _trait_names(text: str) -> List[str]:
        body = re.sub(r"^\s*use\b", "", text, flags=re.IGNORECASE)
        body = re.split(r"[{;]", body, 1)[0]
        return [name.strip() for name in body.split(",") if name.strip()]

    @staticmethod
    def _parse_use_declaration(text: str) -> Dict[str, str]:
        body = re.sub(r"^\s*use\b", "", text, flags=re.IGNORECASE).strip().rstrip(";")
        if re.match(r"^(?:function|const)\b", body, flags=re.IGNORECASE):
            return {}
        clauses: List[str] = []
        group = re.match(r"^(?P<prefix>[\w\\]+)\\\{(?P<members>.*)\}\s*$", body, flags=re.DOTALL)
        if group:
            prefix = group.group("prefix")
            clauses = [f"{prefix}\\{member.strip()}" for member in group.group("members").split(",") if member.strip()]
        else:
            clauses = [clause for clause in body.split(",") if clause.strip()]

        imports: Dict[str, str] = {}
        for clause in clauses:
            match = _USE_CLAUSE.match(clause)
            if match is None:
                continue
            name = match.group("name").lstrip("\\")
            alias = match.group("alias") or name.rsplit("\\", 1)[-1]
            imports[alias.lower()] = name
        return imports

    @staticmethod
    def _qualify(name: str, namespace: str, uses: Dict[str, str]) -> str:
        if name.startswith("\\"):
            return name[1:]
        head, _, rest = name.partition("\\")
        imported = uses.get(head.lower())
        if imported:
            return f"{imported}\\{rest}" if rest else imported
        return f"{namespace}\\{name}" if namespace else name

    @staticmethod
    def _node_text(node, source_bytes) -> str:  # type: ignore[no-untyped-def]
        return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


__all__ = ["TREE_SITTER_AVAILABLE", "TreeSitterDefinitionBuilder", "php_parser"]
