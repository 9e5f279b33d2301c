"""
api/main.py
-----------
Vectors extension — REST API Layer
----------------------------------
Exposes field/batch/text/image vectorization over HTTP. On startup the
extension's readiness hook points the model cache at <root_dir>/models.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from vector_core.errors import FieldDecodeError, FieldTypeError, VectorizeError
from vector_core.extension import VectorHook, VectorsExtension
from vector_core.field_types import FieldMapping
from vector_core.logger import log_event
from vector_core.settings import get_settings
from vision.image_embed import decode_image_field

# ─────────────────────────────────────────────────────────────────────────────
# ⚙️ 1. Global Configuration Layer
# ─────────────────────────────────────────────────────────────────────────────

settings = get_settings()
extension = VectorsExtension()


def get_hook() -> VectorHook:
    return extension.hook

# ─────────────────────────────────────────────────────────────────────────────
# 🔁 2. Lifespan Context
# ─────────────────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the readiness hook once before serving requests."""
    extension.on_ready(settings.root_dir)
    yield

# ─────────────────────────────────────────────────────────────────────────────
# ⚙️ 3. Global App Instance (with lifespan)
# ─────────────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Vectors Extension",
    version="0.1.0",
    description="Field-mapping text and image vectorization.",
    lifespan=lifespan,
)

# ─────────────────────────────────────────────────────────────────────────────
# 📥 4. Request / Response Schemas
# ─────────────────────────────────────────────────────────────────────────────

class FieldsRequest(BaseModel):
    record: Dict[str, Any]
    mappings: List[FieldMapping]

class FieldsResponse(BaseModel):
    record: Dict[str, Any]

class BatchRequest(BaseModel):
    records: List[Dict[str, Any]]
    mappings: List[FieldMapping]
    strict: Optional[bool] = Field(None, description="Raise on fallback failures instead of skipping")

class BatchResponse(BaseModel):
    records: List[Dict[str, Any]]

class TextRequest(BaseModel):
    text: str
    model: str = "BAAI/bge-small-en-v1.5"

class ImageRequest(BaseModel):
    image: str = Field(..., description="Base64-encoded image bytes")
    model: str = "clip-ViT-B-32"

class VectorResponse(BaseModel):
    vector: List[float]
    dimension: int


def _to_http(e: VectorizeError) -> HTTPException:
    """Bad input is the caller's fault (422); everything else is a 500."""
    if isinstance(e, (FieldTypeError, FieldDecodeError)):
        return HTTPException(status_code=422, detail=str(e))
    log_event("request_failed", {"error": str(e)}, level="error")
    return HTTPException(status_code=500, detail=str(e))

# ─────────────────────────────────────────────────────────────────────────────
# 🔍 5. Vectorization Endpoints
# ─────────────────────────────────────────────────────────────────────────────

@app.post("/vectorize/fields", response_model=FieldsResponse)
def vectorize_fields(req: FieldsRequest, hook: VectorHook = Depends(get_hook)):
    try:
        return FieldsResponse(record=hook.vectorize_fields(req.record, req.mappings))
    except VectorizeError as e:
        raise _to_http(e)

@app.post("/vectorize/batch", response_model=BatchResponse)
def vectorize_batch(req: BatchRequest, hook: VectorHook = Depends(get_hook)):
    try:
        return BatchResponse(records=hook.vectorize_fields_batch(req.records, req.mappings, strict=req.strict))
    except VectorizeError as e:
        raise _to_http(e)

@app.post("/vectorize/text", response_model=VectorResponse)
def vectorize_text(req: TextRequest, hook: VectorHook = Depends(get_hook)):
    try:
        vec = hook.vectorize_text(req.text, req.model)
    except VectorizeError as e:
        raise _to_http(e)
    return VectorResponse(vector=vec, dimension=len(vec))

@app.post("/vectorize/image", response_model=VectorResponse)
def vectorize_image(req: ImageRequest, hook: VectorHook = Depends(get_hook)):
    try:
        data = decode_image_field(req.image, "image")
        vec = hook.vectorize_image(data, req.model)
    except VectorizeError as e:
        raise _to_http(e)
    return VectorResponse(vector=vec, dimension=len(vec))

# ─────────────────────────────────────────────────────────────────────────────
# 🩺 6. Health & Status Endpoints
# ─────────────────────────────────────────────────────────────────────────────

@app.get("/health")
def health_check(hook: VectorHook = Depends(get_hook)):
    return {
        "status": "healthy",
        "device": settings.device,
        "text_models": hook.text_cache.identifiers(),
        "image_models": hook.image_cache.identifiers(),
    }

@app.get("/")
def root():
    return extension.status()
