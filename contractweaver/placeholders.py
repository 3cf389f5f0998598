"""Placeholder markers left in woven source for later passes to replace."""

from __future__ import annotations

import re
from enum import Enum
from typing import List

_PREFIX = "CONTRACTWEAVER_"


class Placeholder(str, Enum):
    """Closed set of markers embedded in generated PHP code.

    Markers render as PHP block comments carrying a reserved prefix, so
    annotated output stays valid PHP and cannot collide with source text.
    """

    STRUCTURE_HEADER = "STRUCTURE_HEADER"
    STRUCTURE_BEGIN = "STRUCTURE_BEGIN"
    FUNCTION_HEADER = "FUNCTION_HEADER"
    FUNCTION_BEGIN = "FUNCTION_BEGIN"
    FUNCTION_HOOK = "FUNCTION_HOOK"
    INVARIANT = "INVARIANT"
    PRECONDITION = "PRECONDITION"
    POSTCONDITION = "POSTCONDITION"
    OLD_SETUP = "OLD_SETUP"
    METHOD_INJECT = "METHOD_INJECT"
    ORIGINAL_PATH_HINT = "ORIGINAL_PATH_HINT"

    @property
    def token(self) -> str:
        return f"{_PREFIX}{self.value}_PLACEHOLDER"

    def render(self, argument: str | None = None) -> str:
        """Return the marker text, optionally parameterized by ``argument``."""
        if argument:
            return f"/* {self.token} {argument} */"
        return f"/* {self.token} */"

    def pattern(self) -> re.Pattern[str]:
        return re.compile(r"/\* " + re.escape(self.token) + r"(?: (?P<argument>[^*]*?))? \*/")


def find_placeholders(text: str, placeholder: Placeholder) -> List[str]:
    """Return the arguments of every occurrence of ``placeholder`` in source order.

    Markers without an argument are reported as empty strings.
    """
    return [match.group("argument") or "" for match in placeholder.pattern().finditer(text)]


__all__ = ["Placeholder", "find_placeholders"]
