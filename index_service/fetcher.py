# index_service/fetcher.py
from typing import Optional
import logging

from index_service.models import TermPostingRecord
from index_service.store import StoreSession

logger = logging.getLogger(__name__)


def get_docs_from_index(session: StoreSession, term: str) -> Optional[TermPostingRecord]:
    """
    Exact-match lookup of a term's posting list.

    Returns None for a blank or unknown term. Postings come back exactly as
    stored, including a term whose postings have all been removed.
    """
    if not term or not term.strip():
        logger.warning("Rejected index lookup with empty term.")
        return None

    entry = session.find_term(term)
    if entry is None:
        logger.debug(f"Term '{term}' not found in index.")
        return None
    return TermPostingRecord(term=entry["term"], postings=entry.get("postings", []))


def document_in_index(session: StoreSession, term: str, doc_id: str) -> bool:
    if not term or not doc_id:
        return False
    return session.find_posting(term, doc_id) is not None
