"""
Error taxonomy for the retrieval core.

Every failure is scoped to one request. Component boundaries convert these
into structured ``success=False`` results; the streaming path reports them
as ``error`` events.
"""


class RAGError(Exception):
    """Base class for all ragchat errors."""

    code = "rag_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidInput(RAGError):
    """Malformed caller arguments (bad dimension, out-of-range threshold/limit, empty text)."""

    code = "invalid_input"


class DimensionMismatch(InvalidInput):
    """Two vectors that must share a dimension do not."""

    code = "dimension_mismatch"


class EmbeddingServiceError(RAGError):
    """Upstream embedding API failure. Message is passed through."""

    code = "embedding_service_error"


class GenerationServiceError(RAGError):
    """Upstream chat completion failure. Message is passed through."""

    code = "generation_service_error"


class StoreError(RAGError):
    """Persistence or query failure in the vector store."""

    code = "store_error"


class BatchQueryError(StoreError):
    """One or more queries of a batch failed; no partial results are returned."""

    code = "batch_query_error"

    def __init__(self, failures: int, total: int):
        super().__init__(f"{failures} of {total} queries failed")
        self.failures = failures
        self.total = total


class NotFound(RAGError):
    """Referenced record does not exist."""

    code = "not_found"
