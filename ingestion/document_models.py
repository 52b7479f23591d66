from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping

from ingestion.hash_utils import sha1_text


@dataclass
class RawDoc:
    source_id: str  # stable ID (path, URL or caller tag)
    text: str  # full raw text
    metadata: Dict[str, Any] = field(default_factory=dict)  # title, author, date, ...


@dataclass(frozen=True)
class Chunk:
    """
    Read-only once built: ``metadata`` is a mapping proxy over a private copy.
    Chunks are not hashable; key them by ``id``.
    """

    id: str  # "{source}-chunk-{chunk_index}"
    content: str
    source: str
    chunk_index: int
    total_chunks: int
    start_char: int  # offsets into the assembled stream, not the raw document
    end_char: int
    metadata: Mapping[str, Any] = field(default_factory=dict)

    __hash__ = None

    def __post_init__(self):
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def content_sha1(self) -> str:
        return sha1_text(self.content)
