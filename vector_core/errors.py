"""
vector_core/errors.py
---------------------
Exception hierarchy raised by the vectorization engine.
Every error carries a human-readable message (str(exc)) naming the field
or model involved; callers only need to catch VectorizeError.
"""


class VectorizeError(Exception):
    """Base class for all vectorization failures."""


class FieldTypeError(VectorizeError):
    """A mapped source field holds a value of the wrong type."""

    def __init__(self, field: str, expected: str):
        self.field = field
        super().__init__(f"Field '{field}' must be {expected}")


class FieldDecodeError(VectorizeError):
    """A mapped source field could not be decoded (e.g. invalid base64)."""

    def __init__(self, field: str, cause: Exception):
        self.field = field
        super().__init__(f"Failed to decode base64 from '{field}': {cause}")


class ModelInitError(VectorizeError):
    """The encoder for a model identifier could not be constructed."""

    def __init__(self, kind: str, identifier: str, cause: Exception):
        self.identifier = identifier
        super().__init__(f"Failed to init {kind} model '{identifier}': {cause}")


class EncodingError(VectorizeError):
    """The encoder failed or returned an unusable result."""


class PoisonedHandleError(VectorizeError):
    """A previous holder of a model handle failed while holding its lock."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            f"Model '{identifier}' is poisoned by an earlier failure; evict it to rebuild"
        )
