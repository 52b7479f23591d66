from __future__ import annotations

import re
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from tqdm import tqdm

from common.config import yaml_config
from common.errors import InvalidParameter
from common.logger import get_logger
from ingestion.document_models import Chunk, RawDoc

log = get_logger(__name__)

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def split_sentences(text: str) -> List[str]:
    """
    Split on runs of terminal punctuation and drop blank fragments.
    The terminators themselves are not kept.
    """
    return [s.strip() for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]


def last_words(text: str, max_length: int) -> str:
    """
    Return the trailing whole words of ``text`` that fit in ``max_length``
    characters. Words are never cut, so the result can be shorter than the
    budget (or empty when the last word alone is too long).

    >>> last_words("React Hooks are awesome", 10)
    'awesome'
    """
    if len(text) <= max_length:
        return text

    words = text.split(" ")
    kept: List[str] = []
    kept_len = 0
    for word in reversed(words):
        if kept_len + len(word) + 1 > max_length:
            break
        kept_len = kept_len + len(word) + 1 if kept else len(word)
        kept.append(word)
    return " ".join(reversed(kept))


def _check_chunk_params(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise InvalidParameter(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise InvalidParameter(f"overlap must not be negative, got {overlap}")
    if overlap >= chunk_size:
        raise InvalidParameter(
            f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
        )


class _ChunkAssembler:
    """
    Accumulates sentences into a buffer. When the next sentence would push the
    buffer past ``chunk_size`` the buffer is emitted and reseeded with its own
    word-safe tail followed by that sentence.
    """

    def __init__(
        self, chunk_size: int, overlap: int, source: str, metadata: Dict[str, Any]
    ):
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.source = source
        self.metadata = metadata
        self.buffer = ""
        self.start = 0
        self.chunks: List[Chunk] = []

    def feed(self, sentence: str) -> None:
        if self.buffer and len(self.buffer) + len(sentence) > self.chunk_size:
            self._emit_and_seed(sentence)
        else:
            self.buffer = f"{self.buffer} {sentence}" if self.buffer else sentence

    def finish(self) -> List[Chunk]:
        if self.buffer.strip():
            self._emit()
        total = len(self.chunks)
        return [replace(c, total_chunks=total) for c in self.chunks]

    def _emit_and_seed(self, sentence: str) -> None:
        emitted = self._emit()
        carry = last_words(self.buffer, self.overlap)
        self.buffer = f"{carry} {sentence}"
        self.start = emitted.end_char - len(carry)

    def _emit(self) -> Chunk:
        index = len(self.chunks)
        chunk = Chunk(
            id=f"{self.source}-chunk-{index}",
            content=self.buffer.strip(),
            source=self.source,
            chunk_index=index,
            total_chunks=0,  # back-filled in finish()
            start_char=self.start,
            end_char=self.start + len(self.buffer),
            metadata=self.metadata,
        )
        self.chunks.append(chunk)
        return chunk


def chunk_text(
    text: str,
    chunk_size: int = 500,
    overlap: int = 50,
    source: str = "unknown",
    metadata: Optional[Dict[str, Any]] = None,
) -> List[Chunk]:
    """
    Split text into overlapping, sentence-aligned chunks.

    Every sentence is re-terminated with a period, so the original ``!`` and
    ``?`` are not preserved. A single sentence longer than ``chunk_size`` still
    becomes one (oversized) chunk. ``metadata`` is copied onto every chunk
    untouched.
    """
    _check_chunk_params(chunk_size, overlap)
    if not text or not text.strip():
        return []

    assembler = _ChunkAssembler(chunk_size, overlap, source, metadata or {})
    for s in split_sentences(text):
        assembler.feed(s + ".")
    return assembler.finish()


def chunk_documents(
    docs: Iterable[RawDoc],
    chunk_size: Optional[int] = None,
    overlap: Optional[int] = None,
    show_progress: bool = False,
) -> List[Chunk]:
    """
    Chunk a batch of documents. Parameters left as None come from the
    ``chunking`` section of config/config.yaml.
    """
    chunk_size = chunk_size if chunk_size is not None else yaml_config.chunking.chunk_size
    overlap = overlap if overlap is not None else yaml_config.chunking.overlap
    _check_chunk_params(chunk_size, overlap)

    out: List[Chunk] = []
    n_docs = 0
    for d in tqdm(docs, desc="Chunking documents", disable=not show_progress):
        out.extend(chunk_text(d.text, chunk_size, overlap, d.source_id, d.metadata))
        n_docs += 1
    log.info(
        "Chunked %d documents into %d chunks (chunk_size=%d overlap=%d)",
        n_docs,
        len(out),
        chunk_size,
        overlap,
    )
    return out


def dedup_chunks(chunks: Iterable[Chunk]) -> List[Chunk]:
    """
    Remove repeated chunks within a source (same source and content SHA1),
    keeping the first. Identical text from different sources is kept.

    Survivors are not renumbered: ``chunk_index`` and ``total_chunks`` still
    describe the chunking run, so gaps in the index mark dropped repeats.
    """
    seen = set()
    uniq: List[Chunk] = []
    for c in chunks:
        key = (c.source, c.content_sha1)
        if key not in seen:
            uniq.append(c)
            seen.add(key)
    return uniq
