# index_service/main.py
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import contextlib
import logging

import uvicorn

from config import Config
from index_service.api import router
from index_service.db import Database

# Initialize Logger
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create an instance of the Database class
db = Database()


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Connect to databases
    try:
        logger.info("Connecting to databases...")
        db.connect_to_databases()
        app.state.db = db  # Attach the db instance to app.state for global access
        logger.info("Connected to databases.")
    except Exception as e:
        logger.error(f"Failed to connect to databases on startup: {e}")
        raise e
    try:
        yield
    finally:
        # Shutdown: Close database connections
        try:
            logger.info("Closing database connections...")
            db.close_database_connections()
            logger.info("Database connections closed.")
        except Exception as e:
            logger.error(f"Failed to close database connections on shutdown: {e}")


app = FastAPI(
    title="Search Engine Indexing API",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed JSON, missing fields and missing query parameters are all 400s
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={
            "status": "error",
            "message": "Invalid request",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


app.include_router(router, tags=["Indexing"])


def run():
    uvicorn.run(app, host=Config.HOST, port=Config.PORT)


if __name__ == "__main__":
    run()
