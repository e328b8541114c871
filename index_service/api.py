# index_service/api.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from index_service.dispatcher import ping_index
from index_service.errors import EmptyCorpusError, TransportError
from index_service.fetcher import get_docs_from_index
from index_service.metadata import calc_avg_length, get_document_metadata
from index_service.models import (
    AverageLengthResponse,
    DocumentMetadataRecord,
    ErrorResponse,
    PingIndexRequest,
    PingIndexResponse,
    TermPostingRecord,
)
from index_service.store import StoreSession

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_param(value: str, name: str) -> str:
    if not value.strip():
        raise HTTPException(status_code=400, detail=f"Missing {name}")
    return value


def get_session(request: Request) -> StoreSession:
    # One session per request, drawn from the process-wide client pool
    return request.app.state.db.session()


@router.get("/")
def root():
    return {"message": "Search Engine Indexing API"}


@router.post(
    "/pingIndex",
    response_model=PingIndexResponse,
    responses={404: {"model": ErrorResponse}},
)
def ping(ping_request: PingIndexRequest, session: StoreSession = Depends(get_session)):
    success = ping_index(session, ping_request.doc_ID, ping_request.operation)
    if not success:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(
                message="Failed to process the ping operation"
            ).model_dump(),
        )

    return PingIndexResponse(
        received_doc_ID=ping_request.doc_ID,
        received_operation=ping_request.operation,
        received_timestamp=ping_request.timestamp,
    )


@router.get("/getDocsFromIndex", response_model=TermPostingRecord)
def docs_from_index(
    index_ID: str = Query(..., min_length=1, description="Term to look up"),
    session: StoreSession = Depends(get_session),
):
    try:
        entry = get_docs_from_index(session, _require_param(index_ID, "index_ID"))
    except TransportError as e:
        logger.error(f"Error in getDocsFromIndex: {e}")
        raise HTTPException(status_code=503, detail="Index store unavailable")
    if entry is None:
        raise HTTPException(status_code=404, detail="Index not found")
    return entry


@router.get("/getDocumentMetaData", response_model=DocumentMetadataRecord)
def document_metadata(
    doc_ID: str = Query(..., min_length=1, description="Document identifier"),
    session: StoreSession = Depends(get_session),
):
    try:
        metadata = get_document_metadata(session, _require_param(doc_ID, "doc_ID"))
    except TransportError as e:
        logger.error(f"Error in getDocumentMetaData: {e}")
        raise HTTPException(status_code=503, detail="Index store unavailable")
    if metadata is None:
        raise HTTPException(status_code=404, detail="Document metadata not found")
    return metadata


@router.get("/getAverageDocLength", response_model=AverageLengthResponse)
def average_doc_length(session: StoreSession = Depends(get_session)):
    try:
        average = calc_avg_length(session)
    except EmptyCorpusError as e:
        logger.warning(f"Error in getAverageDocLength: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except TransportError as e:
        logger.error(f"Error in getAverageDocLength: {e}")
        raise HTTPException(status_code=500, detail="Server error")
    return AverageLengthResponse(average_length=average)
