class RetrievalCoreError(Exception):
    """Base class for errors raised by the chunking and ranking core."""


class InvalidParameter(RetrievalCoreError, ValueError):
    """A numeric knob (chunk size, overlap, top_k) is out of range."""


class DimensionMismatch(RetrievalCoreError, ValueError):
    """Two vectors compared or combined have different lengths."""

    def __init__(self, left: int, right: int):
        self.left = left
        self.right = right
        super().__init__(f"Vectors must have the same dimension ({left} != {right})")
