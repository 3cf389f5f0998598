"""Tracks structures that are directly or indirectly related to each other."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .logging import get_logger
from .models import StructureDescriptor

_logger = get_logger("hierarchy")


@dataclass(frozen=True)
class Pending:
    """A structure known to be required that has not been supplied yet."""


@dataclass(frozen=True)
class Resolved:
    """A structure whose descriptor has been supplied."""

    descriptor: StructureDescriptor


HierarchyNode = Union[Pending, Resolved]

PENDING = Pending()


class DependencyHierarchy:
    """Maps qualified names to resolved descriptors or pending placeholders.

    Inserting a structure records its dependencies as pending until they are
    inserted themselves, so a build driver can tell when the dependency closure
    needed for weaving has been supplied. Callers serialize concurrent inserts.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, HierarchyNode] = {}

    def insert(self, descriptor: StructureDescriptor) -> bool:
        """Insert a structure descriptor and register its dependencies."""
        qualified_name = descriptor.qualified_name
        if isinstance(self._nodes.get(qualified_name), Resolved):
            return True

        self._nodes[qualified_name] = Resolved(descriptor)

        for dependency in sorted(descriptor.dependencies):
            if dependency not in self._nodes:
                self._nodes[dependency] = PENDING
                _logger.debug("%s requires pending dependency %s", qualified_name, dependency)

        return True

    def get_entry(self, name: str) -> Optional[StructureDescriptor]:
        """Return the resolved descriptor for ``name``, or None if unknown or pending."""
        node = self._nodes.get(name)
        if isinstance(node, Resolved):
            return node.descriptor
        return None

    def entry_exists(self, name: str) -> bool:
        """Return True when ``name`` is a known dependency that is not resolved yet."""
        return isinstance(self._nodes.get(name), Pending)

    def is_complete(self) -> bool:
        """Return True when every known entry has been resolved."""
        return not any(isinstance(node, Pending) for node in self._nodes.values())

    def pending(self) -> List[str]:
        return sorted(name for name, node in self._nodes.items() if isinstance(node, Pending))

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)


__all__ = ["DependencyHierarchy", "HierarchyNode", "PENDING", "Pending", "Resolved"]
