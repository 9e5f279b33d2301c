"""
vector_core/field_types.py
--------------------------
Field mapping contract and the closed set of record value types.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Union

from pydantic import BaseModel, ConfigDict, Field

# Closed set of values a record field may hold (JSON-compatible).
JSONValue = Union[str, int, float, bool, None, List["JSONValue"], Dict[str, "JSONValue"]]
Record = Dict[str, JSONValue]

TEXT = "text"
IMAGE = "image"


class FieldMapping(BaseModel):
    """Encode record[source] with `model` and store the vector in record[target]."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    field_type: str = TEXT
    model: str

    @property
    def is_image(self) -> bool:
        return self.field_type == IMAGE

    @property
    def is_batchable_text(self) -> bool:
        # other tags are vectorized one record at a time in batch mode
        return self.field_type in (TEXT, "")


def coerce_mappings(mappings: Iterable[Union[FieldMapping, Dict[str, Any]]]) -> List[FieldMapping]:
    """Accept FieldMapping objects or plain dicts from the host."""
    out: List[FieldMapping] = []
    for m in mappings:
        out.append(m if isinstance(m, FieldMapping) else FieldMapping.model_validate(m))
    return out
