"""
tests/test_text_encoder.py
--------------------------
TextEncoder wrapper around a SentenceTransformer-like model.
"""

import numpy as np

from models.text_encoder import TextEncoder, TextModelKind, resolve_device


class StubSentenceModel:
    def __init__(self):
        self.calls = []

    def encode(self, texts, batch_size, normalize_embeddings, convert_to_numpy):
        self.calls.append(
            {"texts": texts, "batch_size": batch_size, "normalize": normalize_embeddings, "numpy": convert_to_numpy}
        )
        return np.array([[float(i), 0.5] for i, _ in enumerate(texts)], dtype=np.float64)


def test_embed_returns_float_lists_in_order():
    stub = StubSentenceModel()
    enc = TextEncoder(TextModelKind.ALL_MINILM_L6_V2, stub, batch_size=16, normalize=False)

    out = enc.embed(("a", "b", "c"))

    assert out == [[0.0, 0.5], [1.0, 0.5], [2.0, 0.5]]
    assert all(type(x) is float for row in out for x in row)
    assert stub.calls == [{"texts": ["a", "b", "c"], "batch_size": 16, "normalize": False, "numpy": True}]
    assert enc.dimension == 384


def test_embed_empty_input_skips_model():
    stub = StubSentenceModel()
    enc = TextEncoder(TextModelKind.BGE_SMALL_EN_V15, stub)
    assert enc.embed([]) == []
    assert stub.calls == []


def test_resolve_device_passes_explicit_values_through():
    assert resolve_device("CUDA ") == "cuda"
    assert resolve_device("") == "cpu"
    assert resolve_device("mps") == "mps"
