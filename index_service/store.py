# index_service/store.py
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, List, Optional
import logging

from pymongo.errors import DuplicateKeyError, PyMongoError

from index_service.errors import TransportError

logger = logging.getLogger(__name__)


class StoreSession(ABC):
    """
    Capability interface over the three logical tables the indexer touches:
    the index table (term -> postings), the metadata table (doc_id -> length)
    and the read-only pipeline table written by the tokenizer.

    Every primitive is a single round trip. Conditional writes report whether
    they matched instead of raising; store and network failures raise
    TransportError.
    """

    # Index table
    @abstractmethod
    def find_term(self, term: str) -> Optional[Dict]:
        ...

    @abstractmethod
    def find_posting(self, term: str, doc_id: str) -> Optional[Dict]:
        """Term Posting Record for `term` if it holds a posting for `doc_id`."""

    @abstractmethod
    def append_position(self, term: str, doc_id: str, position: int) -> bool:
        """Push `position` onto the (term, doc_id) posting. True iff matched."""

    @abstractmethod
    def add_posting(self, term: str, posting: Dict) -> bool:
        """
        Push `posting` into the record for `term`, only if that record has no
        posting for the same doc_id yet. True iff matched.
        """

    @abstractmethod
    def insert_term(self, record: Dict) -> bool:
        """Insert a new Term Posting Record. False if the term already exists."""

    @abstractmethod
    def pull_postings(self, doc_id: str) -> int:
        """Remove every posting for `doc_id` from every term. Returns records modified."""

    # Metadata table
    @abstractmethod
    def find_metadata(self, doc_id: str) -> Optional[Dict]:
        ...

    @abstractmethod
    def insert_metadata(self, record: Dict) -> bool:
        """False if a record for the same doc_id already exists."""

    @abstractmethod
    def delete_metadata(self, doc_id: str) -> int:
        ...

    @abstractmethod
    def list_lengths(self) -> List[int]:
        ...

    # Pipeline table
    @abstractmethod
    def find_pipeline(self, doc_id: str) -> Optional[Dict]:
        ...


@contextmanager
def _store_errors(operation: str):
    try:
        yield
    except PyMongoError as e:
        logger.error(f"Store error during {operation}: {e}")
        raise TransportError(f"{operation} failed: {e}") from e


class MongoStoreSession(StoreSession):
    def __init__(self, index_col, metadata_col, pipeline_col=None):
        self.index_col = index_col
        self.metadata_col = metadata_col
        self.pipeline_col = pipeline_col

    def find_term(self, term):
        with _store_errors("find_term"):
            return self.index_col.find_one({"term": term}, {"_id": 0})

    def find_posting(self, term, doc_id):
        with _store_errors("find_posting"):
            return self.index_col.find_one(
                {"term": term, "postings.doc_id": doc_id}, {"_id": 0}
            )

    def append_position(self, term, doc_id, position):
        with _store_errors("append_position"):
            result = self.index_col.update_one(
                {"term": term, "postings.doc_id": doc_id},
                {"$push": {"postings.$.positions": position}},
            )
        return result.matched_count > 0

    def add_posting(self, term, posting):
        with _store_errors("add_posting"):
            result = self.index_col.update_one(
                {"term": term, "postings.doc_id": {"$ne": posting["doc_id"]}},
                {"$push": {"postings": posting}},
            )
        return result.matched_count > 0

    def insert_term(self, record):
        with _store_errors("insert_term"):
            try:
                result = self.index_col.insert_one(dict(record))
            except DuplicateKeyError:
                logger.debug(f"Term '{record['term']}' was created concurrently.")
                return False
        return result.acknowledged

    def pull_postings(self, doc_id):
        with _store_errors("pull_postings"):
            result = self.index_col.update_many(
                {"postings.doc_id": doc_id},
                {"$pull": {"postings": {"doc_id": doc_id}}},
            )
        return result.modified_count

    def find_metadata(self, doc_id):
        with _store_errors("find_metadata"):
            return self.metadata_col.find_one({"doc_id": doc_id}, {"_id": 0})

    def insert_metadata(self, record):
        with _store_errors("insert_metadata"):
            try:
                result = self.metadata_col.insert_one(dict(record))
            except DuplicateKeyError:
                return False
        return result.acknowledged

    def delete_metadata(self, doc_id):
        with _store_errors("delete_metadata"):
            result = self.metadata_col.delete_many({"doc_id": doc_id})
        return result.deleted_count

    def list_lengths(self):
        with _store_errors("list_lengths"):
            cursor = self.metadata_col.find({}, {"_id": 0, "total_length": 1})
            return [int(doc.get("total_length", 0)) for doc in cursor]

    def find_pipeline(self, doc_id):
        if self.pipeline_col is None:
            raise TransportError("Pipeline database is not connected")
        with _store_errors("find_pipeline"):
            return self.pipeline_col.find_one({"doc_id": doc_id}, {"_id": 0})
