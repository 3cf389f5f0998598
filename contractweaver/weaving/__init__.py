"""Weaving passes that instrument PHP structures with contract hooks."""

from __future__ import annotations

from .injector import FileState, InjectionPass
from .marker import JoinPointMarker
from .pipeline import SourceWeaver, iter_chunks, weave_file
from .substitution import (
    MagicConstantSubstitution,
    PathHint,
    SubstitutionRule,
    extract_path_hint,
    render_path_hint,
)

__all__ = [
    "FileState",
    "InjectionPass",
    "JoinPointMarker",
    "MagicConstantSubstitution",
    "PathHint",
    "SourceWeaver",
    "SubstitutionRule",
    "extract_path_hint",
    "iter_chunks",
    "render_path_hint",
    "weave_file",
]
