# index_service/dispatcher.py
import logging

from pydantic import ValidationError as PydanticValidationError

from index_service import remover
from index_service.errors import NotFoundError, ValidationError
from index_service.models import PipelineRecord
from index_service.mutator import ngram_key, upsert
from index_service.store import StoreSession

logger = logging.getLogger(__name__)


def fetch_pipeline_record(session: StoreSession, document_id: str) -> PipelineRecord:
    record = session.find_pipeline(document_id)
    if not record:
        raise NotFoundError(f"Pipeline record for document {document_id} not found")
    try:
        return PipelineRecord.model_validate(record)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Malformed pipeline record for document {document_id}: {e}"
        ) from e


def _index_pipeline_record(session: StoreSession, document: PipelineRecord) -> bool:
    document_id = document.doc_id

    for token in document.tokens:
        if not upsert(session, token.token, document_id, token.frequency, token.position):
            logger.error(f"Failed to index token '{token.token}' for document {document_id}.")
            return False

    ngrams = [(ngram_key(b.bigram), b.frequency) for b in document.bigrams]
    ngrams += [(ngram_key(t.trigram), t.frequency) for t in document.trigrams]
    for term, frequency in ngrams:
        if not upsert(session, term, document_id, frequency):
            logger.error(f"Failed to index n-gram '{term}' for document {document_id}.")
            return False

    logger.info(
        f"Indexed {len(document.tokens)} tokens and {len(ngrams)} n-grams "
        f"for document {document_id}."
    )
    return True


def add_document(session: StoreSession, document_id: str) -> bool:
    """
    Index a document from its pipeline record.

    A failed term stops the add before the metadata record is written; the
    postings already written stay in place.
    """
    try:
        if not document_id:
            raise ValidationError("doc_ID is required")
        if session.find_metadata(document_id):
            raise ValidationError(f"Document {document_id} already exists")

        document = fetch_pipeline_record(session, document_id)

        if not _index_pipeline_record(session, document):
            return False

        if not session.insert_metadata(
            {"doc_id": document_id, "total_length": document.total_length}
        ):
            logger.error(f"Metadata for document {document_id} was written concurrently.")
            return False
    except (ValidationError, NotFoundError) as e:
        logger.warning(f"Cannot add document {document_id}: {e}")
        return False
    except Exception as e:
        logger.error(f"Error adding document {document_id}: {e}")
        return False

    logger.info(f"Added document {document_id} successfully.")
    return True


def remove_document(session: StoreSession, document_id: str) -> bool:
    return remover.remove(session, document_id)


def update_document(session: StoreSession, document_id: str) -> bool:
    """
    Remove then re-add. The two steps are not atomic: when the add fails
    after a successful remove the document is left out of the index.
    """
    if not remove_document(session, document_id):
        logger.error(f"Update of document {document_id} aborted: remove failed.")
        return False

    if not add_document(session, document_id):
        logger.error(
            f"Update of document {document_id} removed it but could not re-add it; "
            "the document is no longer indexed."
        )
        return False

    logger.info(f"Updated document {document_id} successfully.")
    return True


OPERATIONS = {
    "add": add_document,
    "remove": remove_document,
    "update": update_document,
}


def ping_index(session: StoreSession, document_id: str, operation: str) -> bool:
    handler = OPERATIONS.get((operation or "").strip().lower())
    if handler is None:
        logger.warning(f"Invalid operation type '{operation}' for document {document_id}.")
        return False
    return handler(session, document_id)
