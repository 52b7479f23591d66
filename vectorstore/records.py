from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

import orjson
from langchain_core.documents import Document

from common.errors import DimensionMismatch, InvalidParameter
from common.logger import get_logger
from ingestion.document_models import Chunk
from retrieval.ranker import EmbeddedDocument

log = get_logger(__name__)


def chunk_metadata(chunk: Chunk) -> Dict[str, Any]:
    """
    Flatten a chunk's positional fields on top of the caller metadata, in the
    shape vector indexes expect next to each vector.
    """
    return {
        **chunk.metadata,
        "source": chunk.source,
        "chunk_index": chunk.chunk_index,
        "total_chunks": chunk.total_chunks,
        "start_char": chunk.start_char,
        "end_char": chunk.end_char,
        "content_sha1": chunk.content_sha1,
    }


def to_vector_records(
    chunks: Sequence[Chunk], embeddings: Sequence[Sequence[float]]
) -> List[Dict[str, Any]]:
    """
    Pair each chunk with its embedding as ``{id, values, metadata}``.
    The chunk text travels in ``metadata["content"]`` so a query can get it back.
    """
    if len(chunks) != len(embeddings):
        raise InvalidParameter(
            f"got {len(chunks)} chunks but {len(embeddings)} embeddings"
        )

    records: List[Dict[str, Any]] = []
    dim = len(embeddings[0]) if len(embeddings) else 0
    for c, emb in zip(chunks, embeddings):
        if len(emb) != dim:
            raise DimensionMismatch(dim, len(emb))
        records.append(
            {
                "id": c.id,
                "values": [float(x) for x in emb],
                "metadata": chunk_metadata(c) | {"content": c.content},
            }
        )
    log.info("Prepared %d vector records (dim=%d)", len(records), dim)
    return records


def records_to_documents(records: Iterable[Dict[str, Any]]) -> List[EmbeddedDocument]:
    return [
        EmbeddedDocument(
            id=r["id"], embedding=list(r["values"]), metadata=dict(r.get("metadata", {}))
        )
        for r in records
    ]


def dumps_records(records: Sequence[Dict[str, Any]]) -> bytes:
    return orjson.dumps(list(records), option=orjson.OPT_INDENT_2)


def to_langchain_documents(chunks: Iterable[Chunk]) -> List[Document]:
    """Wrap chunks as LangChain documents for LangChain-backed vector stores."""
    return [
        Document(page_content=c.content, metadata=chunk_metadata(c) | {"chunk_id": c.id})
        for c in chunks
    ]
