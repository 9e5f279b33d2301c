"""
models/__init__.py
------------------
Expose encoder kinds, name parsing and the model caches.
"""

from .text_encoder import TextEncoder, TextModelKind, build_text_encoder, parse_text_model
from .vision_encoder import ImageEncoder, ImageModelKind, build_image_encoder, parse_image_model
from .cache import ModelCache, ModelHandle, default_image_cache, default_text_cache

__all__ = [
    "TextEncoder",
    "TextModelKind",
    "build_text_encoder",
    "parse_text_model",
    "ImageEncoder",
    "ImageModelKind",
    "build_image_encoder",
    "parse_image_model",
    "ModelCache",
    "ModelHandle",
    "default_text_cache",
    "default_image_cache",
]
