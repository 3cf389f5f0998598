"""Streaming injection pass wrapping contract-bearing methods chunk by chunk."""

from __future__ import annotations

import uuid
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Set

from ..analyzers.tokens import OPEN_TAG, Token, TokenStream, scan
from ..config import RuntimeConfig
from ..errors import MissingJoinPointError, UnlocatableHookError
from ..logging import get_logger
from ..models import FunctionDescriptor, HeaderVariant, StructureDescriptor
from ..placeholders import Placeholder
from .scanning import (
    Splice,
    collect_hook,
    function_name_at,
    header_end,
    opens_declaration,
    structure_name_at,
)
from .substitution import MagicConstantSubstitution, render_path_hint


@dataclass
class FileState:
    """Cross-chunk state of one file travelling through the injection pass.

    ``text`` accumulates every chunk received so far; output has been produced
    for ``text[:emitted]``. The rest is held back until the parse settles.
    """

    text: str = ""
    emitted: int = 0
    structure_hook: str = ""
    path_hint_injected: bool = False
    constants_injected: bool = False
    woven: Set[str] = field(default_factory=set)

    @property
    def header_seen(self) -> bool:
        return bool(self.structure_hook)

    @property
    def held_back(self) -> str:
        return self.text[self.emitted :]


def _unique_token() -> str:
    return uuid.uuid4().hex


class InjectionPass:
    """Splices contract checks in front of original method bodies.

    Every eligible method keeps its header and becomes a wrapper that opens a
    contract context, leaves placeholders for invariants, preconditions, old
    values and postconditions, and calls the original body, which is
    re-declared under a suffixed name. Generated code stays on the line of the
    opening brace so original line numbers survive weaving.

    Chunks are appended to the file state and the accumulated text is parsed
    again on every chunk. Output is produced only up to the point where the
    parse can no longer change: complete lines, outside unterminated comments,
    strings or heredocs, and before any declaration header still waiting for
    its ``{`` or ``;``. ``finish`` releases whatever was held back.
    """

    def __init__(
        self,
        structure: StructureDescriptor,
        *,
        runtime: Optional[RuntimeConfig] = None,
        original_suffix: str = "__orig",
        substitution: Optional[MagicConstantSubstitution] = None,
        modification_time: float = 0,
        suffix_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.structure = structure
        self.runtime = runtime or RuntimeConfig()
        self.original_suffix = original_suffix
        self.substitution = substitution or MagicConstantSubstitution()
        self.modification_time = modification_time
        self._suffix_factory = suffix_factory or _unique_token
        self.logger = get_logger("injector")

    def inject_chunk(self, chunk: str, state: FileState) -> str:
        """Accept the next chunk and return the woven output that became settled."""
        state.text += chunk
        return self._advance(state, final=False)

    def finish(self, state: FileState) -> str:
        """Weave the held-back tail; fail when the file offered no structure header."""
        tail = self._advance(state, final=True)
        if not state.header_seen:
            raise MissingJoinPointError(self.structure.qualified_name)
        return tail

    def generate_before_code(self, function: FunctionDescriptor) -> str:
        """Build the wrapper body and the renamed header that re-opens the original body."""
        runtime = self.runtime
        suffix = f"{self.original_suffix}{self._suffix_factory()}"
        context = runtime.context_variable
        result = runtime.result_variable

        code = f"{context} = {runtime.context_class}::open();"

        # No invariant check ahead of a constructor.
        if not (function.is_private or function.is_static or function.is_constructor):
            code += Placeholder.INVARIANT.render()

        code += Placeholder.PRECONDITION.render(function.name)
        code += Placeholder.OLD_SETUP.render(function.name)

        call = function.render_header(HeaderVariant.CALL, suffix)
        invocation = f"{call};" if function.returns_void else f"{result} = {call};"
        if function.is_accessor_hook:
            if not function.returns_void:
                code += f"{result} = null;"
            code += f"try {{{invocation}}} catch ({runtime.exception_class} $e) {{}}"
            code += Placeholder.METHOD_INJECT.render(function.name)
        else:
            code += invocation

        code += Placeholder.POSTCONDITION.render(function.name)

        if not (function.is_private or function.is_static):
            code += Placeholder.INVARIANT.render()

        returned = "return;" if function.returns_void else f"return {result};"
        code += f"if ({context}) {{{runtime.context_class}::close();}} {returned}}}"
        code += function.render_header(HeaderVariant.DECLARATION, suffix, force_concrete=True)
        code += " {"
        return code

    def _advance(self, state: FileState, *, final: bool) -> str:
        begin = state.emitted
        if begin >= len(state.text):
            return ""
        stream = scan(state.text)
        tokens = stream.tokens
        first = bisect_left([token.start for token in tokens], begin)
        end = len(state.text) if final else self._settled_end(stream, first, begin)
        if end <= begin:
            self.logger.debug("Holding back %d character(s) of %s", len(state.held_back), self.structure.path)
            return ""

        edits = Splice()
        for index in range(first, len(tokens)):
            token = tokens[index]
            if token.end > end:
                break
            if not state.path_hint_injected and token.kind == OPEN_TAG and token.text.lower() == "<?php":
                edits.insert(token.end, render_path_hint(self.structure.path, self.modification_time))
                state.path_hint_injected = True
            elif not state.header_seen:
                if structure_name_at(tokens, index) is not None:
                    self._inject_function_hook(tokens, index, edits, state)
            else:
                self._wrap_function(tokens, index, edits, state)

        self.substitution.substitute(tokens, edits, begin, end)
        state.emitted = end
        return edits.apply(state.text[begin:end], begin)

    @staticmethod
    def _settled_end(stream: TokenStream, first: int, begin: int) -> int:
        """Return the offset up to which ``stream`` cannot change as more text arrives."""
        end = min(stream.settled_until(begin), stream.text.rfind("\n") + 1)
        tokens = stream.tokens
        for index in range(first, len(tokens)):
            token = tokens[index]
            if token.start >= end:
                break
            if not opens_declaration(tokens, index):
                continue
            terminator = header_end(tokens, index)
            if terminator is None or terminator > end:
                return token.start
        return end

    def _wrap_function(self, tokens: Sequence[Token], index: int, edits: Splice, state: FileState) -> None:
        name = function_name_at(tokens, index)
        if name is None:
            return
        function = self.structure.get_function(name)
        if function is None or function.is_abstract:
            return
        if name in state.woven:
            self.logger.debug("Skipping %s, already woven in this file", name)
            return
        hook = collect_hook(tokens, index)
        if hook is None:
            raise UnlocatableHookError(name)
        edits.insert(hook.end, self.generate_before_code(function))
        state.woven.add(name)
        self.logger.debug("Wove contract hooks around %s::%s", self.structure.qualified_name, name)

    def _inject_function_hook(
        self, tokens: Sequence[Token], index: int, edits: Splice, state: FileState
    ) -> None:
        hook = collect_hook(tokens, index)
        if hook is None:
            raise UnlocatableHookError(self.structure.qualified_name)
        state.structure_hook = hook.text
        edits.insert(hook.end, Placeholder.FUNCTION_HOOK.render())
        self.logger.debug("Found function hook for %s", self.structure.qualified_name)

        if not state.constants_injected:
            edits.insert(hook.end, self.substitution.declarations(self.structure.path))
            state.constants_injected = True


__all__ = ["FileState", "InjectionPass"]
