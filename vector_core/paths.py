"""
vector_core/paths.py
--------------------
Resolves where encoder weights are cached on disk.
The host configures the directory once (on_ready); until then a relative
default from settings is used.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional, Union

from vector_core.logger import log_event
from vector_core.settings import get_settings

MODELS_SUBDIR = "models"


def models_dir_for_root(root: Union[str, Path]) -> Path:
    """Return the model cache directory under a host root (<root>/models)."""
    return Path(root) / MODELS_SUBDIR


class CacheDirectory:
    """Set-once holder for the model weight cache directory."""

    def __init__(self):
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._announced = False

    def set(self, path: Union[str, Path]) -> bool:
        """Configure the directory. Only the first call has any effect."""
        with self._lock:
            if self._path is not None:
                log_event("models_dir_ignored", {"current": str(self._path), "requested": str(path)})
                return False
            self._path = Path(path)
            return True

    def get(self) -> Path:
        with self._lock:
            path = self._path or Path(get_settings().default_models_dir)
            if not self._announced:
                self._announced = True
                log_event("models_dir_resolved", {"path": str(path), "configured": self._path is not None})
        return path

    @property
    def is_configured(self) -> bool:
        return self._path is not None


_default_dir = CacheDirectory()


def default_cache_directory() -> CacheDirectory:
    """Process-wide resolver shared by the default model caches."""
    return _default_dir
