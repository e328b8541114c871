# tests/test_dispatcher.py
from copy import deepcopy

import pytest

from index_service import dispatcher
from index_service.dispatcher import (
    add_document,
    ping_index,
    remove_document,
    update_document,
)
from index_service.errors import TransportError
from index_service.fetcher import document_in_index
from index_service.memory_store import InMemoryStoreSession


@pytest.fixture
def pipeline(store, pipeline_record):
    store.put_pipeline_record(pipeline_record("doc1"))
    return store


def snapshot(store):
    return deepcopy((store.terms, store.metadata))


def test_add_indexes_tokens_ngrams_and_metadata(store, session, pipeline):
    assert ping_index(session, "doc1", "add")

    assert store.terms["the"]["postings"] == [
        {"doc_id": "doc1", "frequency": 2, "positions": [0, 2]}
    ]
    assert store.terms["hat"]["postings"][0]["positions"] == [3]
    for term in ["thecat", "catthe", "thehat", "thecatthe", "catthehat"]:
        assert store.terms[term]["postings"] == [
            {"doc_id": "doc1", "frequency": 1, "positions": []}
        ]
    assert store.metadata["doc1"] == {"doc_id": "doc1", "total_length": 4}


def test_add_without_pipeline_record_fails(store, session):
    assert add_document(session, "doc1") is False
    assert store.terms == {}
    assert store.metadata == {}


def test_add_twice_is_rejected(store, session, pipeline):
    assert add_document(session, "doc1")
    before = snapshot(store)

    assert add_document(session, "doc1") is False
    assert snapshot(store) == before


def test_add_with_malformed_pipeline_record(store, session, pipeline_record):
    record = pipeline_record("doc1")
    del record["total_length"]
    store.put_pipeline_record(record)

    assert add_document(session, "doc1") is False
    assert store.terms == {}


class PipelineDownSession(InMemoryStoreSession):
    def find_pipeline(self, doc_id):
        raise TransportError("Pipeline database is not connected")


def test_add_pipeline_store_error(store, pipeline):
    assert add_document(PipelineDownSession(store), "doc1") is False
    assert store.metadata == {}


class BrokenTermSession(InMemoryStoreSession):
    def insert_term(self, record):
        if record["term"] == "hat":
            raise TransportError("connection reset")
        return super().insert_term(record)


def test_failed_term_stops_add_before_metadata(store, pipeline):
    assert add_document(BrokenTermSession(store), "doc1") is False

    # Postings written before the failure stay; no metadata record
    assert "the" in store.terms
    assert "hat" not in store.terms
    assert store.metadata == {}


def test_remove(store, session, pipeline):
    add_document(session, "doc1")

    assert ping_index(session, "doc1", "remove")

    assert not document_in_index(session, "the", "doc1")
    assert store.metadata == {}


@pytest.mark.parametrize("operation", ["bogus", "", "delete", None, "add remove"])
def test_unknown_operation_has_no_side_effects(store, session, pipeline, operation):
    add_document(session, "doc1")
    before = snapshot(store)

    assert ping_index(session, "doc1", operation) is False
    assert snapshot(store) == before


def test_operation_is_case_insensitive(session, pipeline):
    assert ping_index(session, "doc1", " ADD ")


def test_update_reindexes_document(store, session, pipeline, pipeline_record):
    add_document(session, "doc1")
    record = pipeline_record("doc1")
    record["tokens"] = [{"token": "dog", "frequency": 1, "position": 0}]
    record["bigrams"] = []
    record["trigrams"] = []
    record["total_length"] = 1
    store.put_pipeline_record(record)

    assert ping_index(session, "doc1", "update")

    assert document_in_index(session, "dog", "doc1")
    assert not document_in_index(session, "the", "doc1")
    assert not document_in_index(session, "thecat", "doc1")
    assert store.metadata["doc1"]["total_length"] == 1


def test_update_of_unindexed_document_adds_it(store, session, pipeline):
    assert update_document(session, "doc1")
    assert "doc1" in store.metadata


class RemoveFailsSession(InMemoryStoreSession):
    def pull_postings(self, doc_id):
        raise TransportError("not primary")


def test_update_short_circuits_when_remove_fails(store, pipeline, monkeypatch):
    calls = []
    monkeypatch.setattr(
        dispatcher, "add_document", lambda session, doc_id: calls.append(doc_id)
    )

    assert update_document(RemoveFailsSession(store), "doc1") is False
    assert calls == []
    assert store.terms == {}


def test_update_leaves_document_unindexed_when_add_fails(store, session, pipeline):
    add_document(session, "doc1")
    del store.pipeline["doc1"]

    assert update_document(session, "doc1") is False

    # Removed but not re-added
    assert not document_in_index(session, "the", "doc1")
    assert store.metadata == {}


def test_remove_document_delegates(session, pipeline):
    add_document(session, "doc1")
    assert remove_document(session, "doc1")
    assert remove_document(session, "doc1")


class StaleMetadataSession(InMemoryStoreSession):
    """Sees the metadata table as it was before a concurrent add committed."""

    def find_metadata(self, doc_id):
        return None


def test_concurrent_add_loser_keeps_its_positions(store, session, pipeline):
    assert add_document(session, "doc1")

    # The metadata insert catches the clash, but the postings are not undone
    assert add_document(StaleMetadataSession(store), "doc1") is False
    assert store.terms["the"]["postings"][0]["positions"] == [0, 2, 0, 2]
    assert store.metadata["doc1"] == {"doc_id": "doc1", "total_length": 4}
