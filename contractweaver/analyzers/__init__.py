"""Descriptor builders that turn PHP source into structure descriptors."""

from __future__ import annotations

from .tree_sitter import TREE_SITTER_AVAILABLE, TreeSitterDefinitionBuilder

__all__ = ["TREE_SITTER_AVAILABLE", "TreeSitterDefinitionBuilder"]
