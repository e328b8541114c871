# tests/conftest.py
import pytest

from index_service.memory_store import InMemoryStore, InMemoryStoreSession


def _pipeline_record(doc_id="doc1"):
    return {
        "doc_id": doc_id,
        "tokens": [
            {"token": "the", "frequency": 2, "position": 0},
            {"token": "cat", "frequency": 1, "position": 1},
            {"token": "the", "frequency": 2, "position": 2},
            {"token": "hat", "frequency": 1, "position": 3},
        ],
        "bigrams": [
            {"bigram": ["the", "cat"], "frequency": 1},
            {"bigram": ["cat", "the"], "frequency": 1},
            {"bigram": ["the", "hat"], "frequency": 1},
        ],
        "trigrams": [
            {"trigram": ["the", "cat", "the"], "frequency": 1},
            {"trigram": ["cat", "the", "hat"], "frequency": 1},
        ],
        "total_length": 4,
    }


@pytest.fixture
def pipeline_record():
    """Factory for tokenizer output of 'the cat the hat'."""
    return _pipeline_record


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def session(store):
    return InMemoryStoreSession(store)
