# index_service/remover.py
from dataclasses import dataclass
import logging

from index_service.errors import TransportError, ValidationError
from index_service.store import StoreSession

logger = logging.getLogger(__name__)


@dataclass
class RemovalResult:
    doc_id: str
    terms_modified: int
    metadata_deleted: int

    @property
    def found(self) -> bool:
        return self.terms_modified > 0 or self.metadata_deleted > 0


def strip_document(session: StoreSession, doc_id: str) -> RemovalResult:
    """
    Pull every posting for `doc_id` out of the index table in one bulk pass,
    then delete its metadata record. Term records left with no postings are
    kept. Raises ValidationError for a blank doc_id and TransportError if the
    store fails; the postings pass is not undone if the metadata delete fails.
    """
    if not doc_id:
        raise ValidationError("doc_id is required")

    terms_modified = session.pull_postings(doc_id)
    logger.info(f"Removed document {doc_id} from {terms_modified} index terms.")

    metadata_deleted = session.delete_metadata(doc_id)
    logger.info(f"Removed {metadata_deleted} metadata record(s) for document {doc_id}.")

    return RemovalResult(doc_id, terms_modified, metadata_deleted)


def remove(session: StoreSession, doc_id: str) -> bool:
    """False only when the store fails; removing an unknown document succeeds."""
    try:
        result = strip_document(session, doc_id)
    except ValidationError as ve:
        logger.warning(f"Rejected remove: {ve}")
        return False
    except TransportError as e:
        logger.error(f"Error removing document {doc_id}: {e}")
        return False

    if not result.found:
        logger.warning(f"Document {doc_id} was not present in the index.")
    return True
