"""
vector_core/extension.py
------------------------
Host-facing entry points.

VectorHook bundles the text and image caches with the four vectorization
calls a host pipeline uses; VectorsExtension is the lifecycle object the
host registers (name, hooks, on_ready).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from embeddings.text_embed import embed_text
from models.cache import ModelCache, default_image_cache, default_text_cache
from vector_core.batch import vectorize_batch
from vector_core.dispatcher import vectorize_record
from vector_core.field_types import FieldMapping, Record, coerce_mappings
from vector_core.logger import log_event
from vector_core.paths import CacheDirectory, default_cache_directory, models_dir_for_root
from vision.image_embed import embed_image

MappingLike = Union[FieldMapping, Dict[str, Any]]


class VectorHook:
    """Vectorization calls backed by a text cache and an image cache."""

    def __init__(self, text_cache: Optional[ModelCache] = None, image_cache: Optional[ModelCache] = None):
        self.text_cache = text_cache if text_cache is not None else default_text_cache()
        self.image_cache = image_cache if image_cache is not None else default_image_cache()

    def vectorize_fields(self, record: Record, mappings: Iterable[MappingLike]) -> Record:
        return vectorize_record(record, coerce_mappings(mappings), self.text_cache, self.image_cache)

    def vectorize_fields_batch(
        self,
        records: Iterable[Record],
        mappings: Iterable[MappingLike],
        strict: Optional[bool] = None,
    ) -> List[Record]:
        return vectorize_batch(records, coerce_mappings(mappings), self.text_cache, self.image_cache, strict=strict)

    def vectorize_text(self, text: str, model: str) -> List[float]:
        return embed_text(self.text_cache, text, model)

    def vectorize_image(self, data: bytes, model: str) -> List[float]:
        return embed_image(self.image_cache, data, model)


class VectorsExtension:
    """Registers one VectorHook and points the model cache at <root>/models."""

    name = "vectors"

    def __init__(self, hook: Optional[VectorHook] = None, cache_dir: Optional[CacheDirectory] = None):
        self._hook = hook
        self._cache_dir = cache_dir if cache_dir is not None else default_cache_directory()

    @property
    def hook(self) -> VectorHook:
        if self._hook is None:
            self._hook = VectorHook()
        return self._hook

    def vector_hooks(self) -> List[VectorHook]:
        return [self.hook]

    def on_ready(self, root_dir: Union[str, Path]) -> Path:
        """Readiness hook: call once before any vectorization."""
        path = models_dir_for_root(root_dir)
        self._cache_dir.set(path)
        log_event("extension_ready", {"extension": self.name, "models_dir": str(self._cache_dir.get())})
        return path

    def status(self) -> Dict[str, str]:
        return {"extension": self.name, "status": "active"}
