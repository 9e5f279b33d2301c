"""
vector_core/batch.py
--------------------
Batch vectorization across many records.

Text mappings are grouped: every non-empty source string of the batch goes
to the encoder in a single call and the vectors are scattered back to their
records by index. Other field types fall back to per-record handling.

Error policy differs on purpose between the two paths:
    • text mappings fail fast (one encoder call covers the whole batch)
    • fallback mappings are best-effort; a record that fails is left without
      the target field, unless strict mode is requested
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from embeddings.text_embed import batch_embed_texts
from models.cache import ModelCache
from vector_core.dispatcher import apply_mapping
from vector_core.errors import VectorizeError
from vector_core.field_types import FieldMapping, Record
from vector_core.logger import log_event
from vector_core.settings import get_settings


def collect_texts(records: Sequence[Record], source: str) -> List[Tuple[int, str]]:
    """(index, text) for each record whose source is a non-empty string, in record order."""
    pairs: List[Tuple[int, str]] = []
    for i, record in enumerate(records):
        value = record.get(source)
        if isinstance(value, str) and value:
            pairs.append((i, value))
    return pairs


def _vectorize_text_mapping(records: List[Record], mapping: FieldMapping, text_cache: ModelCache) -> int:
    pairs = collect_texts(records, mapping.source)
    if not pairs:
        return 0

    vecs = batch_embed_texts(text_cache, [text for _, text in pairs], mapping.model)
    for (idx, _), vec in zip(pairs, vecs):
        records[idx][mapping.target] = [float(x) for x in vec]
    return len(pairs)


def _vectorize_fallback_mapping(
    records: List[Record],
    mapping: FieldMapping,
    text_cache: ModelCache,
    image_cache: ModelCache,
    strict: bool,
) -> int:
    written = 0
    for i, record in enumerate(records):
        try:
            if apply_mapping(record, mapping, text_cache, image_cache):
                written += 1
        except VectorizeError as e:
            if strict:
                raise
            log_event(
                "batch_fallback_skipped",
                {"index": i, "source": mapping.source, "field_type": mapping.field_type, "error": str(e)},
                level="warn",
            )
    return written


def vectorize_batch(
    records: Iterable[Record],
    mappings: Iterable[FieldMapping],
    text_cache: ModelCache,
    image_cache: ModelCache,
    strict: Optional[bool] = None,
) -> List[Record]:
    """
    Apply mappings (in order) to a batch of records and return new records.
    `strict=None` defers to settings.batch_strict_fallback.
    """
    if strict is None:
        strict = get_settings().batch_strict_fallback

    out = [dict(r) for r in records]
    for mapping in mappings:
        if mapping.is_batchable_text:
            written = _vectorize_text_mapping(out, mapping, text_cache)
        else:
            written = _vectorize_fallback_mapping(out, mapping, text_cache, image_cache, strict)
        if written:
            log_event(
                "batch_mapping_applied",
                {"source": mapping.source, "target": mapping.target, "written": written, "records": len(out)},
            )
    return out
