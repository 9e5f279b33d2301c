"""
vector_core/dispatcher.py
-------------------------
Routes each mapped record field to the text or image encoder and writes
the resulting vector into the mapping's target field.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from embeddings.text_embed import embed_text
from models.cache import ModelCache
from vector_core.errors import EncodingError, FieldTypeError
from vector_core.field_types import FieldMapping, Record
from vision.image_embed import decode_image_field, embed_image


# ────────────────────────────────────────────────────────────────
# SINGLE MAPPING
# ────────────────────────────────────────────────────────────────
def embed_field(
    record: Record,
    mapping: FieldMapping,
    text_cache: ModelCache,
    image_cache: ModelCache,
) -> Optional[List[float]]:
    """
    Compute the vector for one mapping without touching the record.
    Returns None when there is nothing to embed (missing, null or empty text).
    """
    value = record.get(mapping.source)
    if value is None:
        return None

    if mapping.is_image:
        if not isinstance(value, str):
            raise FieldTypeError(mapping.source, "a base64 string")
        data = decode_image_field(value, mapping.source)
        try:
            return embed_image(image_cache, data, mapping.model)
        except EncodingError as e:
            raise EncodingError(f"Image field '{mapping.source}': {e}") from e

    # text (default for every other tag)
    if not isinstance(value, str):
        raise FieldTypeError(mapping.source, "a string")
    if not value:
        return None
    try:
        return embed_text(text_cache, value, mapping.model)
    except EncodingError as e:
        raise EncodingError(f"Text field '{mapping.source}': {e}") from e


def apply_mapping(
    record: Record,
    mapping: FieldMapping,
    text_cache: ModelCache,
    image_cache: ModelCache,
) -> bool:
    """Vectorize one mapping in place. Returns True if the target was written."""
    vector = embed_field(record, mapping, text_cache, image_cache)
    if vector is None:
        return False
    record[mapping.target] = [float(x) for x in vector]
    return True


# ────────────────────────────────────────────────────────────────
# MAIN ROUTER
# ────────────────────────────────────────────────────────────────
def vectorize_record(
    record: Record,
    mappings: Iterable[FieldMapping],
    text_cache: ModelCache,
    image_cache: ModelCache,
) -> Record:
    """
    Apply every mapping in order and return the transformed record.
    Works on a copy: if any mapping fails the error propagates and the
    caller's record is left exactly as it was.
    """
    out = dict(record)
    for mapping in mappings:
        apply_mapping(out, mapping, text_cache, image_cache)
    return out
