"""
tests/conftest.py
-----------------
Fake encoders and isolated caches so tests never load real weights.
"""

import json
import threading
import time

import pytest

from models.cache import ModelCache
from vector_core.extension import VectorHook
from vector_core.paths import CacheDirectory
from vector_core.settings import get_settings

TEXT_DIM = 4
IMAGE_DIM = 3


def text_vector(text):
    """Deterministic 4-d vector the fake text encoder returns for `text`."""
    return [float(len(text)), float(ord(text[0])), float(sum(map(ord, text))), 1.0]


def image_vector(data):
    return [float(len(data)), float(data[0]), 0.5]


class FakeTextEncoder:
    dimension = TEXT_DIM

    def __init__(self, identifier, encode_delay=0.0):
        self.identifier = identifier
        self.encode_delay = encode_delay
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._guard = threading.Lock()

    def embed(self, texts):
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.encode_delay:
                time.sleep(self.encode_delay)
            self.calls.append(list(texts))
            return [text_vector(t) for t in texts]
        finally:
            with self._guard:
                self.active -= 1


class FakeImageEncoder:
    dimension = IMAGE_DIM

    def __init__(self, identifier):
        self.identifier = identifier
        self.calls = []

    def embed_bytes(self, images):
        self.calls.append(list(images))
        return [image_vector(b) for b in images]


class CountingFactory:
    """Encoder factory recording every construction (identifier, cache_dir)."""

    def __init__(self, encoder_cls, delay=0.0, **encoder_kwargs):
        self.encoder_cls = encoder_cls
        self.delay = delay
        self.encoder_kwargs = encoder_kwargs
        self.calls = []
        self.built = {}
        self.fail_next = 0
        self._lock = threading.Lock()

    def __call__(self, identifier, cache_dir):
        with self._lock:
            self.calls.append((identifier, cache_dir))
            if self.fail_next:
                self.fail_next -= 1
                raise OSError(f"weights for {identifier} not found")
        if self.delay:
            time.sleep(self.delay)
        encoder = self.encoder_cls(identifier, **self.encoder_kwargs)
        self.built[identifier] = encoder
        return encoder


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("VECTORS_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("VECTORS_LOG_ECHO", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def read_events(tmp_path):
    """Return all logged events (optionally of one type) from the test's log dir."""
    def _read(event_type=None):
        events = []
        for path in sorted((tmp_path / "logs").glob("*.jsonl")):
            for line in path.read_text(encoding="utf-8").splitlines():
                events.append(json.loads(line))
        if event_type is not None:
            events = [e for e in events if e["type"] == event_type]
        return events
    return _read


@pytest.fixture
def cache_dir(tmp_path):
    d = CacheDirectory()
    d.set(tmp_path / "models")
    return d


@pytest.fixture
def text_factory():
    return CountingFactory(FakeTextEncoder)


@pytest.fixture
def image_factory():
    return CountingFactory(FakeImageEncoder)


@pytest.fixture
def text_cache(text_factory, cache_dir):
    return ModelCache("text", text_factory, cache_dir=cache_dir)


@pytest.fixture
def image_cache(image_factory, cache_dir):
    return ModelCache("image", image_factory, cache_dir=cache_dir)


@pytest.fixture
def hook(text_cache, image_cache):
    return VectorHook(text_cache=text_cache, image_cache=image_cache)
