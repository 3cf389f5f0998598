"""Join-point marking pass run once over a fully buffered file."""

from __future__ import annotations

from ..analyzers.tokens import tokenize
from ..logging import get_logger
from ..placeholders import Placeholder
from .scanning import Splice, collect_hook, function_name_at, structure_name_at


class JoinPointMarker:
    """Marks structure and function headers and bodies for later weaving stages.

    Each class, trait and named function with a body receives a header marker
    right before its opening brace, where later stages splice extra parent
    types, and a body-begin marker right after it, where they splice members
    or code. Bodiless declarations are left unmarked.
    """

    def __init__(self) -> None:
        self.logger = get_logger("marker")

    def mark(self, text: str) -> str:
        tokens = tokenize(text)
        edits = Splice()
        for index in range(len(tokens)):
            name = structure_name_at(tokens, index)
            if name is not None:
                header, begin = Placeholder.STRUCTURE_HEADER, Placeholder.STRUCTURE_BEGIN
            else:
                name = function_name_at(tokens, index)
                if name is None:
                    continue
                header, begin = Placeholder.FUNCTION_HEADER, Placeholder.FUNCTION_BEGIN

            hook = collect_hook(tokens, index)
            if hook is None:
                self.logger.debug("No body to mark for %s", name)
                continue
            edits.insert(hook.brace.start, header.render())
            edits.insert(hook.brace.end, begin.render())
            self.logger.debug("Marked join points of %s", name)
        return edits.apply(text)


__all__ = ["JoinPointMarker"]
