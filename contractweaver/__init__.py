"""Compile-time contract weaving for PHP structures."""

from __future__ import annotations

from .hierarchy import DependencyHierarchy
from .models import FunctionDescriptor, HeaderVariant, Parameter, StructureDescriptor, Visibility
from .weaving import SourceWeaver, weave_file

__all__ = [
    "DependencyHierarchy",
    "FunctionDescriptor",
    "HeaderVariant",
    "Parameter",
    "SourceWeaver",
    "StructureDescriptor",
    "Visibility",
    "weave_file",
]
