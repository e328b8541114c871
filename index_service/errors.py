# index_service/errors.py


class IndexServiceError(Exception):
    """Base class for errors raised by the indexing service."""


class ValidationError(IndexServiceError, ValueError):
    """A required field (doc_ID, operation, term) is missing or empty."""


class NotFoundError(IndexServiceError):
    """A pipeline record, term or metadata record does not exist."""


class TransportError(IndexServiceError):
    """The backing store could not be reached or rejected the operation."""


class EmptyCorpusError(IndexServiceError):
    def __init__(self, message: str = "no documents indexed"):
        super().__init__(message)
