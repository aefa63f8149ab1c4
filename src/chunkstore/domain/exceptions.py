class VectorStoreError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConstructionError(VectorStoreError):
    """The store could not be built (bad configuration, engine creation failed)."""


class ValidationError(VectorStoreError):
    """A request was rejected before reaching the backend (e.g. top_k == 0)."""


class MutationError(VectorStoreError):
    """An insert or delete statement was rejected by the backend."""


class QueryError(VectorStoreError):
    """A read failed at the backend or while decoding its rows."""


class CodecError(VectorStoreError):
    """Embedding text could not be encoded or decoded."""


class ParseError(CodecError):
    """Malformed token in pgvector text."""
