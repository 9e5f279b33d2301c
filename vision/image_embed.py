"""
vision/image_embed.py
---------------------
Image embedding calls against the shared model cache, plus the base64
decoding used for image fields.
"""

from __future__ import annotations

import base64
from typing import List

from models.cache import ModelCache
from vector_core.errors import EncodingError, FieldDecodeError


def decode_image_field(value: str, field: str) -> bytes:
    """Decode a standard-alphabet base64 string; reject anything malformed."""
    try:
        return base64.b64decode(value, validate=True)
    except ValueError as e:  # binascii.Error, or non-ASCII input
        raise FieldDecodeError(field, e) from e


def embed_image(cache: ModelCache, data: bytes, model: str) -> List[float]:
    """Embed one encoded image (PNG/JPEG/... bytes) with the cached encoder for `model`."""
    handle = cache.get_or_init(model)
    with handle.locked() as encoder:
        try:
            vecs = encoder.embed_bytes([data])
        except Exception as e:
            raise EncodingError(f"Image embedding failed: {e}") from e

    if not vecs:
        raise EncodingError("Image embedding returned empty result")
    return list(vecs[0])
