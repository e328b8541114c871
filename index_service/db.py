# index_service/db.py
from pymongo import ASCENDING, MongoClient
from pymongo.errors import ConnectionFailure
from typing import Optional
import logging

from config import Config
from index_service.memory_store import InMemoryStore, InMemoryStoreSession
from index_service.store import MongoStoreSession, StoreSession

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, backend: Optional[str] = None):
        self.backend = (backend or Config.STORE_BACKEND).lower()

        self.index_client = None
        self.index_db = None
        self.inverted_index_col = None
        self.metadata_col = None

        self.pipeline_client = None
        self.pipeline_db = None
        self.pipeline_col = None  # Collection owned by the tokenizer pipeline

        self.memory_store = None

    def connect_to_databases(self):
        if self.backend == "memory":
            self.memory_store = InMemoryStore()
            logger.info("Using in-memory index store.")
            return
        if self.backend != "mongo":
            raise ValueError(f"Unknown STORE_BACKEND '{self.backend}'")

        try:
            self.index_client = MongoClient(
                Config.INDEX_DB_URI,
                serverSelectionTimeoutMS=Config.SERVER_SELECTION_TIMEOUT_MS,
            )
            self.index_db = self.index_client[Config.INDEX_DATABASE_NAME]
            self.inverted_index_col = self.index_db[Config.INDEX_COLLECTION]
            self.metadata_col = self.index_db[Config.METADATA_COLLECTION]

            # Unique keys back the upsert conflict detection and the
            # one-metadata-record-per-document rule
            self.inverted_index_col.create_index([("term", ASCENDING)], unique=True)
            self.metadata_col.create_index([("doc_id", ASCENDING)], unique=True)

            logger.info("Successfully connected to the Indexing Database.")

        except Exception as e:
            logger.error(f"Error connecting to the Indexing Database: {e}")
            raise e

        # Attempt to connect to the tokenizer pipeline store
        try:
            self.pipeline_client = MongoClient(
                Config.PIPELINE_DB_URI,
                serverSelectionTimeoutMS=Config.SERVER_SELECTION_TIMEOUT_MS,
            )
            self.pipeline_db = self.pipeline_client[Config.PIPELINE_DATABASE_NAME]
            self.pipeline_col = self.pipeline_db[Config.PIPELINE_COLLECTION]
            # Force connection by pinging the server
            self.pipeline_client.admin.command("ping")
            logger.info("Successfully connected to the Pipeline Database.")
        except ConnectionFailure as e:
            logger.warning(f"Could not connect to the Pipeline Database: {e}")
            self.pipeline_col = None

    def session(self) -> StoreSession:
        if self.memory_store is not None:
            return InMemoryStoreSession(self.memory_store)
        if self.inverted_index_col is None:
            raise RuntimeError("Database is not connected")
        return MongoStoreSession(
            self.inverted_index_col, self.metadata_col, self.pipeline_col
        )

    def close_database_connections(self):
        try:
            if self.index_client:
                self.index_client.close()
            if self.pipeline_client:
                self.pipeline_client.close()
            logger.info("Closed all database connections.")
        except Exception as e:
            logger.error(f"Error closing database connections: {e}")
            raise e
