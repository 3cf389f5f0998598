"""Sequences the weaving passes for one file."""

from __future__ import annotations

import codecs
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Union

from ..config import WeaverConfig, default_config
from ..logging import get_logger
from ..models import StructureDescriptor
from .injector import FileState, InjectionPass
from .marker import JoinPointMarker
from .substitution import MagicConstantSubstitution, default_rules

Chunk = Union[str, bytes]


class SourceWeaver:
    """Weaves one file delivered as an ordered sequence of chunks.

    Chunks go through the injection pass as they arrive, which emits woven text
    as soon as it is settled; the marking pass runs over the buffered result
    when the file is closed. A file whose weaving fails produces no output at
    all.
    """

    def __init__(
        self,
        structure: StructureDescriptor,
        *,
        config: Optional[WeaverConfig] = None,
        modification_time: Optional[float] = None,
        suffix_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.structure = structure
        self.config = config or default_config()
        self.logger = get_logger("pipeline")
        if modification_time is None:
            modification_time = self._modification_time(structure.path)
        weaving = self.config.weaving
        self.injector = InjectionPass(
            structure,
            runtime=self.config.runtime,
            original_suffix=weaving.original_suffix,
            substitution=MagicConstantSubstitution(
                default_rules(weaving.dir_constant, weaving.file_constant)
            ),
            modification_time=modification_time,
            suffix_factory=suffix_factory,
        )
        self.marker = JoinPointMarker()
        self.state = FileState()
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer: List[str] = []
        self._closed = False
        self.logger.debug("Weaving %s from %s", structure.qualified_name, structure.path)

    def feed(self, chunk: Chunk) -> None:
        """Run the injection pass over the next chunk of the file."""
        if self._closed:
            raise ValueError("Cannot feed a closed weaver")
        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        if not text:
            return
        self._buffer.append(self.injector.inject_chunk(text, self.state))

    def close(self) -> str:
        """Finish the file and return the fully woven and marked source."""
        if self._closed:
            raise ValueError("Weaver already closed")
        self._closed = True
        tail = self._decoder.decode(b"", final=True)
        if tail:
            self._buffer.append(self.injector.inject_chunk(tail, self.state))
        self._buffer.append(self.injector.finish(self.state))
        woven = self.marker.mark("".join(self._buffer))
        self._buffer.clear()
        self.logger.info(
            "Wove %d method(s) of %s", len(self.state.woven), self.structure.qualified_name
        )
        return woven

    def weave(self, chunks: Iterable[Chunk]) -> str:
        for chunk in chunks:
            self.feed(chunk)
        return self.close()

    def _modification_time(self, path: str) -> float:
        try:
            return Path(path).stat().st_mtime
        except OSError:
            self.logger.warning("Unable to read modification time of %s; recording 0", path)
            return 0


def iter_chunks(text: str, size: Optional[int]) -> Iterator[str]:
    """Split ``text`` into chunks of at least ``size`` characters on line boundaries."""
    if not size or size <= 0:
        if text:
            yield text
        return
    buffer: List[str] = []
    length = 0
    for line in text.splitlines(keepends=True):
        buffer.append(line)
        length += len(line)
        if length >= size:
            yield "".join(buffer)
            buffer = []
            length = 0
    if buffer:
        yield "".join(buffer)


def weave_file(
    path: Path,
    structure: StructureDescriptor,
    *,
    config: Optional[WeaverConfig] = None,
    modification_time: Optional[float] = None,
) -> str:
    """Read ``path`` and weave ``structure`` into it."""
    config = config or default_config()
    text = Path(path).read_text(encoding="utf-8")
    weaver = SourceWeaver(structure, config=config, modification_time=modification_time)
    return weaver.weave(iter_chunks(text, config.weaving.chunk_size))


__all__ = ["SourceWeaver", "iter_chunks", "weave_file"]
