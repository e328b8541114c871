# index_service/models.py
from pydantic import BaseModel, Field
from typing import List


# Stored records
class DocumentPosting(BaseModel):
    doc_id: str
    frequency: int = Field(0, ge=0)
    positions: List[int] = Field(default_factory=list)


class TermPostingRecord(BaseModel):
    term: str
    postings: List[DocumentPosting] = Field(default_factory=list)


class DocumentMetadataRecord(BaseModel):
    doc_id: str
    total_length: int = Field(..., ge=0)


# Tokenizer pipeline output (read-only)
class PipelineToken(BaseModel):
    token: str
    frequency: int = Field(..., ge=0)
    position: int


class PipelineBigram(BaseModel):
    bigram: List[str] = Field(..., min_length=2, max_length=2)
    frequency: int = Field(..., ge=0)


class PipelineTrigram(BaseModel):
    trigram: List[str] = Field(..., min_length=3, max_length=3)
    frequency: int = Field(..., ge=0)


class PipelineRecord(BaseModel):
    doc_id: str
    tokens: List[PipelineToken] = Field(default_factory=list)
    bigrams: List[PipelineBigram] = Field(default_factory=list)
    trigrams: List[PipelineTrigram] = Field(default_factory=list)
    total_length: int = Field(..., ge=0)


# HTTP bodies
class PingIndexRequest(BaseModel):
    doc_ID: str = Field(..., min_length=1)
    operation: str = Field(..., min_length=1)  # "add", "remove", "update"
    timestamp: str = Field(..., min_length=1)


class PingIndexResponse(BaseModel):
    status: str = "success"
    received_doc_ID: str
    received_operation: str
    received_timestamp: str
    message: str = "Ping operation processed successfully"


class AverageLengthResponse(BaseModel):
    average_length: int


class ErrorResponse(BaseModel):
    status: str = "error"
    message: str
