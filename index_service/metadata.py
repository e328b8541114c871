# index_service/metadata.py
from typing import List, Optional
import logging

from index_service.errors import EmptyCorpusError
from index_service.models import DocumentMetadataRecord
from index_service.store import StoreSession

logger = logging.getLogger(__name__)


def get_doc_lengths(session: StoreSession) -> List[int]:
    """One total_length per stored metadata record, in no particular order."""
    return session.list_lengths()


def calc_avg_length(session: StoreSession) -> int:
    """
    Integer average document length over the corpus, truncated.

    Raises EmptyCorpusError when no document is indexed and TransportError
    when the metadata table cannot be read.
    """
    lengths = get_doc_lengths(session)
    if not lengths:
        raise EmptyCorpusError()
    average = sum(lengths) // len(lengths)
    logger.debug(f"Average length over {len(lengths)} documents: {average}")
    return average


def get_document_metadata(
    session: StoreSession, doc_id: str
) -> Optional[DocumentMetadataRecord]:
    if not doc_id:
        return None
    record = session.find_metadata(doc_id)
    if not record:
        return None
    return DocumentMetadataRecord(
        doc_id=record["doc_id"], total_length=record["total_length"]
    )
