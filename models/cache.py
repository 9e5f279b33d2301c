"""
models/cache.py
---------------
Process-wide cache of loaded encoders, keyed by model identifier.

Encoders are expensive to build (disk I/O, weight downloads) and not safe
to call from several threads at once, so each one lives in a ModelHandle:
a shared object whose encoder is only reachable while holding its lock.

    cache = ModelCache("text", build_text_encoder)
    handle = cache.get_or_init("bge-small-en-v1.5")
    with handle.locked() as encoder:
        vecs = encoder.embed(["hello"])

Construction for one identifier happens at most once at a time; a failed
construction inserts nothing, so the next call retries.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from vector_core.errors import ModelInitError, PoisonedHandleError, VectorizeError
from vector_core.logger import log_event
from vector_core.paths import CacheDirectory, default_cache_directory
from models.text_encoder import build_text_encoder
from models.vision_encoder import build_image_encoder

EncoderFactory = Callable[[str, Path], Any]


class ModelHandle:
    """Shared, lock-guarded encoder instance."""

    def __init__(self, identifier: str, encoder: Any):
        self.identifier = identifier
        self._encoder = encoder
        self._lock = threading.Lock()
        self._poisoned = False

    @property
    def is_poisoned(self) -> bool:
        return self._poisoned

    @contextmanager
    def locked(self) -> Iterator[Any]:
        """Hold exclusive access to the encoder for the duration of the block.

        Blocks while another caller holds the handle. A VectorizeError raised
        inside the block is an ordinary failure; any other exception poisons
        the handle and every later acquisition raises PoisonedHandleError.
        """
        with self._lock:
            if self._poisoned:
                raise PoisonedHandleError(self.identifier)
            try:
                yield self._encoder
            except (VectorizeError, GeneratorExit):
                raise
            except BaseException as e:
                self._poisoned = True
                log_event(
                    "handle_poisoned",
                    {"model": self.identifier, "error": repr(e)},
                    level="error",
                )
                raise


class ModelCache:
    """Identifier -> ModelHandle mapping with lazy, single-flight construction."""

    def __init__(
        self,
        kind: str,
        factory: EncoderFactory,
        cache_dir: Optional[CacheDirectory] = None,
    ):
        self.kind = kind
        self._factory = factory
        self._cache_dir = cache_dir if cache_dir is not None else default_cache_directory()
        self._entries: Dict[str, ModelHandle] = {}
        self._init_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def __contains__(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def identifiers(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def get(self, identifier: str) -> Optional[ModelHandle]:
        with self._lock:
            return self._entries.get(identifier)

    def get_or_init(self, identifier: str) -> ModelHandle:
        """Return the cached handle, building the encoder on first use."""
        handle = self.get(identifier)
        if handle is not None:
            return handle

        with self._init_lock(identifier):
            # another thread may have finished while we waited
            handle = self.get(identifier)
            if handle is not None:
                return handle

            cache_dir = self._cache_dir.get()
            log_event("model_init_started", {"kind": self.kind, "model": identifier, "cache_dir": str(cache_dir)})
            try:
                encoder = self._factory(identifier, cache_dir)
            except Exception as e:
                log_event(
                    "model_init_failed",
                    {"kind": self.kind, "model": identifier, "error": str(e)},
                    level="error",
                )
                raise ModelInitError(self.kind, identifier, e) from e

            handle = ModelHandle(identifier, encoder)
            with self._lock:
                self._entries[identifier] = handle
            log_event("model_ready", {"kind": self.kind, "model": identifier})
            return handle

    def evict(self, identifier: str) -> bool:
        """Drop a handle (e.g. a poisoned one) so the next call rebuilds it."""
        with self._lock:
            return self._entries.pop(identifier, None) is not None

    def _init_lock(self, identifier: str) -> threading.Lock:
        with self._lock:
            return self._init_locks.setdefault(identifier, threading.Lock())


# ──────────────────────────────────────────────────────────────────────────────
# Process-wide defaults (created once, never torn down)
# ──────────────────────────────────────────────────────────────────────────────
_defaults: Dict[str, ModelCache] = {}
_defaults_lock = threading.Lock()


def default_text_cache() -> ModelCache:
    with _defaults_lock:
        if "text" not in _defaults:
            _defaults["text"] = ModelCache("text", build_text_encoder)
        return _defaults["text"]


def default_image_cache() -> ModelCache:
    with _defaults_lock:
        if "image" not in _defaults:
            _defaults["image"] = ModelCache("image", build_image_encoder)
        return _defaults["image"]
