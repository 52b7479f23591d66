from __future__ import annotations

import heapq
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import islice
from operator import attrgetter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from common.config import yaml_config
from common.errors import DimensionMismatch, InvalidParameter
from common.logger import get_logger
from retrieval.vector_math import Vector, unit_scaled

log = get_logger(__name__)

_by_similarity = attrgetter("similarity")


@dataclass
class EmbeddedDocument:
    id: str
    embedding: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RankedResult:
    item: Any  # the caller's object, returned as-is
    similarity: float


def _check_top_k(top_k: int) -> None:
    if top_k < 0:
        raise InvalidParameter(f"top_k must not be negative, got {top_k}")


def _cosine_scores(query: Vector, embeddings: Sequence[Vector]) -> np.ndarray:
    """Exact cosine of ``query`` against every embedding, one row per item."""
    dim = len(query)
    for emb in embeddings:
        if len(emb) != dim:
            raise DimensionMismatch(dim, len(emb))
    if not embeddings:
        return np.zeros(0)

    q, q_scale = unit_scaled(query)
    if q_scale == 0:
        return np.zeros(len(embeddings))

    matrix = np.asarray(embeddings, dtype=np.float64).reshape(len(embeddings), dim)
    # rescale each row by its largest component so squaring cannot overflow
    row_scale = np.abs(matrix).max(axis=1, keepdims=True)
    matrix = np.divide(matrix, row_scale, out=np.zeros_like(matrix), where=row_scale != 0)

    denom = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    scores = np.divide(matrix @ q, denom, out=np.zeros(len(embeddings)), where=denom != 0)
    return np.clip(scores, -1.0, 1.0)


def rank(
    query_vector: Vector,
    items: Iterable[Tuple[Any, Vector]],
    min_similarity: float = 0.7,
    top_k: int = 3,
) -> List[RankedResult]:
    """
    Brute-force cosine ranking of ``(item, embedding)`` pairs.

    Items scoring below ``min_similarity`` are dropped before the list is cut
    to ``top_k``. Equal scores keep their input order. A single embedding of
    the wrong length fails the whole call with DimensionMismatch.
    """
    _check_top_k(top_k)
    pairs = list(items)
    scores = _cosine_scores(query_vector, [emb for _, emb in pairs])

    kept = [
        RankedResult(item=item, similarity=float(score))
        for (item, _), score in zip(pairs, scores)
        if score >= min_similarity
    ]
    # list.sort is stable, also with reverse=True
    kept.sort(key=_by_similarity, reverse=True)
    log.debug(
        "Ranked %d items: %d above %.3f, returning %d",
        len(pairs),
        len(kept),
        min_similarity,
        min(len(kept), top_k),
    )
    return kept[:top_k]


def rank_documents(
    query_vector: Vector,
    documents: Iterable[Any],
    min_similarity: Optional[float] = None,
    top_k: Optional[int] = None,
) -> List[RankedResult]:
    """
    Rank objects exposing an ``embedding`` attribute (e.g. EmbeddedDocument).
    Knobs left as None come from the ``ranking`` section of config/config.yaml.
    """
    if min_similarity is None:
        min_similarity = yaml_config.ranking.min_similarity
    if top_k is None:
        top_k = yaml_config.ranking.top_k
    return rank(
        query_vector,
        ((d, d.embedding) for d in documents),
        min_similarity=min_similarity,
        top_k=top_k,
    )


def merge_top_k(partials: Iterable[Sequence[RankedResult]], top_k: int) -> List[RankedResult]:
    """
    Merge per-shard results that are each already sorted best-first.
    On equal scores the earlier shard wins.
    """
    _check_top_k(top_k)
    merged = heapq.merge(*partials, key=_by_similarity, reverse=True)
    return list(islice(merged, top_k))


def rank_in_shards(
    query_vector: Vector,
    items: Iterable[Tuple[Any, Vector]],
    shard_size: int,
    min_similarity: float = 0.7,
    top_k: int = 3,
    max_workers: Optional[int] = None,
) -> List[RankedResult]:
    """
    Same result as ``rank`` over the full list, computed shard by shard.
    With ``max_workers`` the shards are scored on a thread pool.
    """
    if shard_size <= 0:
        raise InvalidParameter(f"shard_size must be positive, got {shard_size}")
    _check_top_k(top_k)
    pairs = list(items)
    shards = [pairs[i : i + shard_size] for i in range(0, len(pairs), shard_size)]

    def _rank_shard(shard):
        return rank(query_vector, shard, min_similarity=min_similarity, top_k=top_k)

    if max_workers:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            partials = list(pool.map(_rank_shard, shards))
    else:
        partials = [_rank_shard(s) for s in shards]
    log.debug("Ranked %d items in %d shards", len(pairs), len(shards))
    return merge_top_k(partials, top_k)
