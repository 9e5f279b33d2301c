"""
models/vision_encoder.py
------------------------
Wrapper for open_clip vision encoders.
Default: open_clip ViT-B/32 (openai weights), 512-d normalized vectors.
"""

from __future__ import annotations

from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import List, Sequence

from vector_core.logger import log_event
from vector_core.settings import get_settings
from models.text_encoder import resolve_device


class ImageModelKind(Enum):
    # (open_clip architecture, pretrained tag, output dimension)
    CLIP_VIT_B_32 = ("ViT-B-32", "openai", 512)

    @property
    def architecture(self) -> str:
        return self.value[0]

    @property
    def pretrained(self) -> str:
        return self.value[1]

    @property
    def dimension(self) -> int:
        return self.value[2]


DEFAULT_IMAGE_MODEL = ImageModelKind.CLIP_VIT_B_32

IMAGE_MODEL_ALIASES = {
    "clip-ViT-B-32": ImageModelKind.CLIP_VIT_B_32,
    "CLIP-ViT-B-32": ImageModelKind.CLIP_VIT_B_32,
    "clip-vit-b-32": ImageModelKind.CLIP_VIT_B_32,
}


def parse_image_model(name: str) -> ImageModelKind:
    """Map a model name or alias to its kind; unknown names get the default."""
    kind = IMAGE_MODEL_ALIASES.get(name)
    if kind is None:
        log_event(
            "unknown_image_model",
            {"model": name, "default": DEFAULT_IMAGE_MODEL.architecture},
            level="warn",
        )
        return DEFAULT_IMAGE_MODEL
    return kind


class ImageEncoder:
    """CLIP model + preprocess transforms, fed with raw encoded image bytes."""

    def __init__(self, kind: ImageModelKind, model, preprocess, device: str = "cpu"):
        self.kind = kind
        self.model = model
        self.preprocess = preprocess
        self.device = device

    @property
    def dimension(self) -> int:
        return self.kind.dimension

    def embed_bytes(self, images: Sequence[bytes]) -> List[List[float]]:
        """Return one normalized embedding per image, in input order."""
        import torch
        from PIL import Image

        if not images:
            return []
        tensors = [self.preprocess(Image.open(BytesIO(data)).convert("RGB")) for data in images]
        batch = torch.stack(tensors).to(self.device)
        with torch.no_grad():
            feats = self.model.encode_image(batch)
            feats /= feats.norm(dim=-1, keepdim=True)
        return feats.cpu().float().numpy().tolist()


def build_image_encoder(identifier: str, cache_dir: Path) -> ImageEncoder:
    """Load the CLIP model named by `identifier`, downloading into cache_dir if needed."""
    import open_clip

    kind = parse_image_model(identifier)
    device = resolve_device(get_settings().device)
    model, _, preprocess = open_clip.create_model_and_transforms(
        kind.architecture,
        pretrained=kind.pretrained,
        cache_dir=str(cache_dir),
    )
    model.to(device).eval()
    return ImageEncoder(kind, model, preprocess, device=device)
