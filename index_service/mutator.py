# index_service/mutator.py
from typing import Optional, Sequence
import logging

from config import Config
from index_service.errors import TransportError
from index_service.store import StoreSession

logger = logging.getLogger(__name__)


def ngram_key(parts: Sequence[str], separator: Optional[str] = None) -> str:
    """Index key for a bigram or trigram."""
    if separator is None:
        separator = Config.NGRAM_SEPARATOR
    return separator.join(parts)


def _new_posting(doc_id: str, frequency: int, position: Optional[int]) -> dict:
    return {
        "doc_id": doc_id,
        "frequency": frequency,
        "positions": [] if position is None else [position],
    }


def _try_upsert(
    session: StoreSession,
    term: str,
    doc_id: str,
    frequency: int,
    position: Optional[int],
) -> Optional[bool]:
    """
    One pass over the three tiers. Returns True once the occurrence is
    recorded, or None when the term record was created by someone else
    between tier 2 and tier 3 and the pass has to be repeated.
    """
    # Tier 1: posting for (term, doc_id) already exists
    if position is None:
        if session.find_posting(term, doc_id) is not None:
            return True
    elif session.append_position(term, doc_id, position):
        return True

    posting = _new_posting(doc_id, frequency, position)

    # Tier 2: term exists, this document is new to it
    if session.add_posting(term, posting):
        return True

    # Tier 3: first time this term is seen
    if session.insert_term({"term": term, "postings": [posting]}):
        return True
    return None


def upsert(
    session: StoreSession,
    term: str,
    doc_id: str,
    frequency: int,
    position: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> bool:
    """
    Record one occurrence of `term` in `doc_id`.

    The frequency of an existing posting is never refreshed; it keeps the
    value from the call that created it. `position=None` is used for bigram
    and trigram terms, which carry no positions.

    Each tier is a single conditional write, so two callers racing on a new
    (term, doc_id) pair cannot both create a posting or a term record. The
    loser of a tier 3 insert re-runs the tiers, at most `max_attempts` times
    in total, with no backoff.
    """
    if not term or not doc_id:
        logger.warning(f"Rejected upsert with empty term or doc_id: {term!r}, {doc_id!r}")
        return False
    if max_attempts is None:
        max_attempts = Config.UPSERT_MAX_ATTEMPTS

    try:
        for attempt in range(1, max_attempts + 1):
            outcome = _try_upsert(session, term, doc_id, frequency, position)
            if outcome is not None:
                logger.debug(f"Indexed term '{term}' for document '{doc_id}'.")
                return outcome
            logger.debug(
                f"Upsert conflict on term '{term}' (attempt {attempt}/{max_attempts})."
            )
    except TransportError as e:
        logger.error(f"Error indexing term '{term}' for document '{doc_id}': {e}")
        return False

    logger.error(
        f"Gave up indexing term '{term}' for document '{doc_id}' after {max_attempts} attempts."
    )
    return False
