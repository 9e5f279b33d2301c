"""
tests/test_model_cache.py
-------------------------
Lazy construction, idempotence, concurrency and poisoning of ModelCache.
"""

import threading

import pytest

from conftest import CountingFactory, FakeTextEncoder
from embeddings.text_embed import embed_text
from models.cache import ModelCache, ModelHandle
from vector_core.errors import EncodingError, ModelInitError, PoisonedHandleError


def test_first_call_builds_and_later_calls_hit(text_cache, text_factory, tmp_path):
    first = text_cache.get_or_init("bge-small-en-v1.5")
    again = text_cache.get_or_init("bge-small-en-v1.5")

    assert first is again
    assert len(text_factory.calls) == 1
    assert text_factory.calls[0] == ("bge-small-en-v1.5", tmp_path / "models")
    assert "bge-small-en-v1.5" in text_cache
    assert len(text_cache) == 1


def test_distinct_identifiers_get_distinct_handles(text_cache, text_factory):
    a = text_cache.get_or_init("bge-small-en-v1.5")
    b = text_cache.get_or_init("BAAI/bge-small-en-v1.5")
    assert a is not b
    assert text_cache.identifiers() == ["BAAI/bge-small-en-v1.5", "bge-small-en-v1.5"]
    assert len(text_factory.calls) == 2


def test_concurrent_misses_build_once(cache_dir):
    factory = CountingFactory(FakeTextEncoder, delay=0.05)
    cache = ModelCache("text", factory, cache_dir=cache_dir)
    n = 8
    barrier = threading.Barrier(n)
    handles, errors = [], []

    def worker():
        barrier.wait()
        try:
            handles.append(cache.get_or_init("all-MiniLM-L6-v2"))
        except Exception as e:  # pragma: no cover - surfaced by the assert below
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(handles) == n
    assert all(h is handles[0] for h in handles)
    assert len(factory.calls) == 1


def test_failed_construction_is_not_cached_and_retries(text_cache, text_factory, read_events):
    text_factory.fail_next = 1

    with pytest.raises(ModelInitError) as exc_info:
        text_cache.get_or_init("bge-base-en-v1.5")
    assert exc_info.value.identifier == "bge-base-en-v1.5"
    assert "bge-base-en-v1.5" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, OSError)
    assert "bge-base-en-v1.5" not in text_cache
    assert len(read_events("model_init_failed")) == 1

    handle = text_cache.get_or_init("bge-base-en-v1.5")
    assert isinstance(handle, ModelHandle)
    assert len(text_factory.calls) == 2


def test_handle_serializes_encoder_access(cache_dir):
    factory = CountingFactory(FakeTextEncoder, encode_delay=0.01)
    cache = ModelCache("text", factory, cache_dir=cache_dir)
    threads = [
        threading.Thread(target=embed_text, args=(cache, f"text {i}", "m"))
        for i in range(6)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    encoder = factory.built["m"]
    assert len(encoder.calls) == 6
    assert encoder.max_active == 1


def test_unexpected_error_poisons_handle(text_cache, read_events):
    handle = text_cache.get_or_init("m")
    with pytest.raises(RuntimeError):
        with handle.locked():
            raise RuntimeError("boom")

    assert handle.is_poisoned
    with pytest.raises(PoisonedHandleError) as exc_info:
        embed_text(text_cache, "hello", "m")
    assert exc_info.value.identifier == "m"
    assert len(read_events("handle_poisoned")) == 1


def test_encoding_errors_do_not_poison(text_cache):
    handle = text_cache.get_or_init("m")
    with pytest.raises(EncodingError):
        with handle.locked():
            raise EncodingError("bad input")
    assert not handle.is_poisoned
    assert embed_text(text_cache, "ok", "m")


def test_evict_allows_rebuild_after_poison(text_cache, text_factory):
    handle = text_cache.get_or_init("m")
    with pytest.raises(ValueError):
        with handle.locked():
            raise ValueError("corrupted state")

    assert text_cache.evict("m") is True
    assert text_cache.evict("m") is False
    fresh = text_cache.get_or_init("m")
    assert fresh is not handle
    assert not fresh.is_poisoned
    assert len(text_factory.calls) == 2


def test_lock_released_after_failure(text_cache):
    handle = text_cache.get_or_init("m")
    with pytest.raises(EncodingError):
        with handle.locked():
            raise EncodingError("x")
    # a second acquisition must not deadlock
    with handle.locked() as encoder:
        assert isinstance(encoder, FakeTextEncoder)
