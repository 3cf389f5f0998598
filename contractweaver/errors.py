"""Exceptions raised while weaving contract code into PHP sources."""

from __future__ import annotations


class WeaverError(RuntimeError):
    """Base class for contractweaver failures."""


class GeneratorError(WeaverError):
    """Raised when instrumented code cannot be generated for a file."""

    def __init__(self, message: str, subject: str) -> None:
        super().__init__(message)
        self.subject = subject


class MissingJoinPointError(GeneratorError):
    """Raised when a file contains no structure header to hook into."""

    def __init__(self, structure: str) -> None:
        super().__init__(f"Could not find function hook within {structure}", structure)


class UnlocatableHookError(GeneratorError):
    """Raised when the opening brace of a structure or method cannot be located."""

    def __init__(self, subject: str) -> None:
        super().__init__(f"Not able to inject condition code for {subject}", subject)


__all__ = [
    "GeneratorError",
    "MissingJoinPointError",
    "UnlocatableHookError",
    "WeaverError",
]
