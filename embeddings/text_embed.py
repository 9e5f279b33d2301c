"""
embeddings/text_embed.py
------------------------
Text embedding calls against the shared model cache.

Core API:
    - embed_text(cache, text, model) -> list[float]
    - batch_embed_texts(cache, texts, model) -> list[list[float]]

Behavior:
    • Resolves (or lazily builds) the encoder for `model`
    • Holds the encoder's lock for exactly one encode call
    • Batch output always has one vector per input text, in input order
"""

from __future__ import annotations

from typing import List, Sequence

from models.cache import ModelCache
from vector_core.errors import EncodingError
from vector_core.logger import log_event


def embed_text(cache: ModelCache, text: str, model: str) -> List[float]:
    """Embed a single text with the cached encoder for `model`."""
    handle = cache.get_or_init(model)
    with handle.locked() as encoder:
        try:
            vecs = encoder.embed([text])
        except Exception as e:
            raise EncodingError(f"Text embedding failed: {e}") from e

    if not vecs:
        raise EncodingError("Text embedding returned empty result")
    return list(vecs[0])


def batch_embed_texts(cache: ModelCache, texts: Sequence[str], model: str) -> List[List[float]]:
    """Embed many texts in one encoder invocation."""
    if not texts:
        return []
    handle = cache.get_or_init(model)
    with handle.locked() as encoder:
        try:
            vecs = encoder.embed(list(texts))
        except Exception as e:
            raise EncodingError(f"Batch text embedding failed for model '{model}': {e}") from e

    if len(vecs) != len(texts):
        raise EncodingError(
            f"Batch text embedding for model '{model}' returned {len(vecs)} vectors for {len(texts)} texts"
        )
    log_event("batch_embedded", {"model": model, "samples": len(texts)})
    return [list(v) for v in vecs]
