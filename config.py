import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    STORE_BACKEND = os.getenv("STORE_BACKEND", "mongo").lower()

    # Indexing Component MongoDB
    INDEX_DB_URI = os.getenv("INDEX_DB_URI", "mongodb://localhost:27017/")
    INDEX_DATABASE_NAME = os.getenv("INDEX_DATABASE_NAME", "IndexingDB")
    INDEX_COLLECTION = os.getenv("INDEX_COLLECTION", "inverted_index")
    METADATA_COLLECTION = os.getenv("METADATA_COLLECTION", "document_metadata")

    # Tokenizer pipeline output, owned upstream
    PIPELINE_DB_URI = os.getenv("PIPELINE_DB_URI", INDEX_DB_URI)
    PIPELINE_DATABASE_NAME = os.getenv("PIPELINE_DATABASE_NAME", "DocumentDataStore")
    PIPELINE_COLLECTION = os.getenv("PIPELINE_COLLECTION", "transformed_documents")

    SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("SERVER_SELECTION_TIMEOUT_MS", "5000"))

    UPSERT_MAX_ATTEMPTS = int(os.getenv("UPSERT_MAX_ATTEMPTS", "3"))
    if UPSERT_MAX_ATTEMPTS < 1:
        raise ValueError("UPSERT_MAX_ATTEMPTS must be a positive integer.")
    NGRAM_SEPARATOR = os.getenv("NGRAM_SEPARATOR", "")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "8080"))
