"""
Incremental parser for the idea stream.

The endpoint answers either with one JSON document or with newline-delimited
JSON documents, each one a cumulative (possibly partial) copy of
``{"ideas": [...]}``. The parser turns raw chunks into successive idea batches
without caring where the transport split them.
"""

import codecs
import json
from typing import Any, Iterable, List, Optional, Tuple, Union

from bigtoy.constants import MAX_IDEAS, RECORD_SEPARATOR, STREAM_ENCODING
from bigtoy.models.idea import Idea
from bigtoy.utils.logger import logger

IdeaBatch = Tuple[Idea, ...]
Chunk = Union[bytes, str]


def normalize_ideas(raw_ideas: List[Any], limit: int = MAX_IDEAS) -> IdeaBatch:
    """
    Keep the renderable elements of a decoded ``ideas`` array.

    Args:
        raw_ideas: Decoded ``ideas`` array
        limit: Maximum number of ideas to keep

    Returns:
        Renderable ideas in their original order, capped at ``limit``
    """
    ideas = []
    for raw in raw_ideas:
        idea = Idea.from_raw(raw)
        if idea is None:
            continue
        ideas.append(idea)
        if len(ideas) == limit:
            break
    return tuple(ideas)


def parse_line(line: str, limit: int = MAX_IDEAS) -> Optional[IdeaBatch]:
    """
    Parse one candidate line of the stream.

    Args:
        line: A complete line, or the trailing segment at end of input
        limit: Maximum number of ideas to keep

    Returns:
        The batch described by the line, or None if the line is blank,
        malformed or not shaped like ``{"ideas": [...]}``
    """
    text = line.strip()
    if not text:
        return None

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        # Truncated lines are expected while the model is still writing
        logger.debug(f"Skipping malformed stream line ({e}): {text[:80]}")
        return None

    if not isinstance(payload, dict):
        return None
    raw_ideas = payload.get("ideas")
    if not isinstance(raw_ideas, list):
        return None

    return normalize_ideas(raw_ideas, limit)


class IdeaStreamParser:
    """Accumulates stream chunks and reports every new idea batch."""

    def __init__(self, limit: int = MAX_IDEAS):
        self.limit = limit
        self._decoder = codecs.getincrementaldecoder(STREAM_ENCODING)(errors="replace")
        self._buffer = ""
        self._batch: IdeaBatch = ()
        self._closed = False

    @property
    def batch(self) -> IdeaBatch:
        """Latest successfully parsed batch."""
        return self._batch

    @property
    def pending(self) -> str:
        """Trailing text that has not been terminated by a newline yet."""
        return self._buffer

    def feed(self, chunk: Chunk) -> List[IdeaBatch]:
        """
        Append a chunk and parse every line it completes.

        Args:
            chunk: Raw bytes from the transport, or already decoded text

        Returns:
            New batches in the order they were parsed; empty if the chunk
            did not change the current batch
        """
        if self._closed:
            raise ValueError("Cannot feed a closed parser")

        if isinstance(chunk, bytes):
            self._buffer += self._decoder.decode(chunk)
        else:
            self._buffer += chunk

        *lines, self._buffer = self._buffer.split(RECORD_SEPARATOR)
        return self._consume(lines)

    def close(self) -> List[IdeaBatch]:
        """
        Signal end of input and parse the trailing segment.

        Returns:
            New batches produced by the trailing segment, if any
        """
        if self._closed:
            return []
        self._closed = True

        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return self._consume(tail.split(RECORD_SEPARATOR))

    def _consume(self, lines: List[str]) -> List[IdeaBatch]:
        updates = []
        for line in lines:
            batch = parse_line(line, self.limit)
            # A line with nothing renderable never retracts ideas already shown
            if not batch or batch == self._batch:
                continue
            self._batch = batch
            updates.append(batch)
        return updates


def iter_batches(chunks: Iterable[Chunk], limit: int = MAX_IDEAS):
    """
    Yield every new batch produced by a sequence of chunks.

    Args:
        chunks: Raw chunks in arrival order
        limit: Maximum number of ideas per batch

    Yields:
        Idea batches, the last one being the final result
    """
    parser = IdeaStreamParser(limit)
    for chunk in chunks:
        yield from parser.feed(chunk)
    yield from parser.close()
