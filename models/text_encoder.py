"""
models/text_encoder.py
----------------------
Wrapper around local sentence-transformers text embedding models.
Known aliases resolve to a fixed set of pretrained encoders; anything
else falls back to BAAI/bge-small-en-v1.5 (384-d).
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Sequence

import numpy as np

from vector_core.logger import log_event
from vector_core.settings import get_settings


class TextModelKind(Enum):
    # (hub repository id, output dimension)
    BGE_SMALL_EN_V15 = ("BAAI/bge-small-en-v1.5", 384)
    BGE_BASE_EN_V15 = ("BAAI/bge-base-en-v1.5", 768)
    BGE_LARGE_EN_V15 = ("BAAI/bge-large-en-v1.5", 1024)
    ALL_MINILM_L6_V2 = ("sentence-transformers/all-MiniLM-L6-v2", 384)

    @property
    def repo_id(self) -> str:
        return self.value[0]

    @property
    def dimension(self) -> int:
        return self.value[1]


DEFAULT_TEXT_MODEL = TextModelKind.BGE_SMALL_EN_V15

TEXT_MODEL_ALIASES = {
    "BAAI/bge-small-en-v1.5": TextModelKind.BGE_SMALL_EN_V15,
    "bge-small-en-v1.5": TextModelKind.BGE_SMALL_EN_V15,
    "BAAI/bge-base-en-v1.5": TextModelKind.BGE_BASE_EN_V15,
    "bge-base-en-v1.5": TextModelKind.BGE_BASE_EN_V15,
    "BAAI/bge-large-en-v1.5": TextModelKind.BGE_LARGE_EN_V15,
    "bge-large-en-v1.5": TextModelKind.BGE_LARGE_EN_V15,
    "sentence-transformers/all-MiniLM-L6-v2": TextModelKind.ALL_MINILM_L6_V2,
    "all-MiniLM-L6-v2": TextModelKind.ALL_MINILM_L6_V2,
}


def parse_text_model(name: str) -> TextModelKind:
    """Map a model name or alias to its kind; unknown names get the default."""
    kind = TEXT_MODEL_ALIASES.get(name)
    if kind is None:
        log_event(
            "unknown_text_model",
            {"model": name, "default": DEFAULT_TEXT_MODEL.repo_id},
            level="warn",
        )
        return DEFAULT_TEXT_MODEL
    return kind


def resolve_device(requested: str) -> str:
    """Turn "auto" into cuda/cpu depending on what torch can see."""
    candidate = (requested or "cpu").strip().lower()
    if candidate != "auto":
        return candidate
    import torch
    return "cuda" if torch.cuda.is_available() else "cpu"


class TextEncoder:
    """Loaded SentenceTransformer plus the settings used to call it."""

    def __init__(self, kind: TextModelKind, model, batch_size: int = 32, normalize: bool = True):
        self.kind = kind
        self.model = model
        self.batch_size = batch_size
        self.normalize = normalize

    @property
    def dimension(self) -> int:
        return self.kind.dimension

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """Encode texts in one call; output order matches input order."""
        if not texts:
            return []
        vecs = self.model.encode(
            list(texts),
            batch_size=self.batch_size,
            normalize_embeddings=self.normalize,
            convert_to_numpy=True,
        )
        vecs = np.asarray(vecs, dtype=np.float32)
        return [[float(x) for x in row] for row in vecs]


def build_text_encoder(identifier: str, cache_dir: Path) -> TextEncoder:
    """Load the text model named by `identifier`, downloading into cache_dir if needed."""
    from sentence_transformers import SentenceTransformer

    settings = get_settings()
    kind = parse_text_model(identifier)
    model = SentenceTransformer(
        kind.repo_id,
        device=resolve_device(settings.device),
        cache_folder=str(cache_dir),
    )
    return TextEncoder(
        kind,
        model,
        batch_size=settings.text_batch_size,
        normalize=settings.normalize_embeddings,
    )
