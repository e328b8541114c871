# index_service/memory_store.py
from copy import deepcopy
from typing import Dict, Optional
import threading
import logging

from index_service.store import StoreSession

logger = logging.getLogger(__name__)


class InMemoryStore:
    """
    Process-local stand-in for the index and pipeline databases, used with
    STORE_BACKEND=memory and by the test suite. Each session primitive holds
    `lock` for its whole duration, the same single-document atomicity MongoDB
    gives an update_one.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self.terms: Dict[str, Dict] = {}
        self.metadata: Dict[str, Dict] = {}
        self.pipeline: Dict[str, Dict] = {}

    def put_pipeline_record(self, record: Dict):
        with self.lock:
            self.pipeline[record["doc_id"]] = deepcopy(record)

    def clear(self):
        with self.lock:
            self.terms.clear()
            self.metadata.clear()
            self.pipeline.clear()


def _posting_for(record: Dict, doc_id: str) -> Optional[Dict]:
    for posting in record["postings"]:
        if posting["doc_id"] == doc_id:
            return posting
    return None


class InMemoryStoreSession(StoreSession):
    def __init__(self, store: InMemoryStore):
        self.store = store

    def find_term(self, term):
        with self.store.lock:
            return deepcopy(self.store.terms.get(term))

    def find_posting(self, term, doc_id):
        with self.store.lock:
            record = self.store.terms.get(term)
            if record is None or _posting_for(record, doc_id) is None:
                return None
            return deepcopy(record)

    def append_position(self, term, doc_id, position):
        with self.store.lock:
            record = self.store.terms.get(term)
            posting = _posting_for(record, doc_id) if record else None
            if posting is None:
                return False
            posting["positions"].append(position)
            return True

    def add_posting(self, term, posting):
        with self.store.lock:
            record = self.store.terms.get(term)
            if record is None or _posting_for(record, posting["doc_id"]):
                return False
            record["postings"].append(deepcopy(posting))
            return True

    def insert_term(self, record):
        with self.store.lock:
            if record["term"] in self.store.terms:
                logger.debug(f"Term '{record['term']}' was created concurrently.")
                return False
            self.store.terms[record["term"]] = deepcopy(record)
            return True

    def pull_postings(self, doc_id):
        modified = 0
        with self.store.lock:
            for record in self.store.terms.values():
                kept = [p for p in record["postings"] if p["doc_id"] != doc_id]
                if len(kept) != len(record["postings"]):
                    record["postings"] = kept
                    modified += 1
        return modified

    def find_metadata(self, doc_id):
        with self.store.lock:
            return deepcopy(self.store.metadata.get(doc_id))

    def insert_metadata(self, record):
        with self.store.lock:
            if record["doc_id"] in self.store.metadata:
                return False
            self.store.metadata[record["doc_id"]] = deepcopy(record)
            return True

    def delete_metadata(self, doc_id):
        with self.store.lock:
            return 1 if self.store.metadata.pop(doc_id, None) is not None else 0

    def list_lengths(self):
        with self.store.lock:
            return [int(r["total_length"]) for r in self.store.metadata.values()]

    def find_pipeline(self, doc_id):
        with self.store.lock:
            return deepcopy(self.store.pipeline.get(doc_id))
