"""
FastAPI main application for the Bookshelf API.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import List

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import config
from api.database import BookStore, build_client_options
from api.models import (
    Book, BookIn, CreateBookResponse, MessageResponse,
    ErrorResponse, HealthResponse
)
from utilities.logger import setup_logging

# Setup logging
logger = structlog.get_logger(__name__)

# Global database service
db_service: BookStore = None

STORE_ERROR_MESSAGE = "Something wrong, please try again."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )
    logger.info("Starting Bookshelf API", port=config.port)

    # Initialize database connection
    global db_service
    client = None
    try:
        client = AsyncIOMotorClient(config.mongodb_url, **build_client_options(config))
        database = client[config.mongodb_database]

        # Test connection
        await database.command("ping")
        logger.info(
            "Database connection established",
            database=config.mongodb_database,
            collection=config.mongodb_collection
        )

        db_service = BookStore(database[config.mongodb_collection])

    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        if client is not None:
            client.close()
        raise

    yield

    # Shutdown
    logger.info("Shutting down Bookshelf API")
    db_service = None
    client.close()


# Create FastAPI application
app = FastAPI(
    title=config.api_title,
    description=config.api_description,
    version=config.api_version,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request bodies that do not decode into a book."""
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    logger.info("Rejected request body", path=request.url.path, detail=detail)
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="Invalid request body", detail=detail).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if config.debug else None
        ).model_dump(exclude_none=True)
    )


def get_db_service() -> BookStore:
    """Return the database service, or fail the request if it is not up."""
    if not db_service:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return db_service


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    db_status = "unavailable"
    if db_service:
        health_info = await db_service.health_check()
        db_status = health_info.get("status", "unknown")

    if db_status == "healthy":
        service_status = "healthy"
    elif db_status == "unhealthy":
        service_status = "unhealthy"
    else:
        service_status = "degraded"

    return HealthResponse(
        status=service_status,
        timestamp=datetime.utcnow(),
        version=config.api_version,
        database_status=db_status
    )


# Books endpoints
@app.get("/", response_model=List[Book], tags=["Books"])
async def list_books():
    """Get every book in the collection, in store order."""
    store = get_db_service()
    try:
        books = await store.list_books()
    except Exception as e:
        logger.error("Failed to list books", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=STORE_ERROR_MESSAGE
        )

    return JSONResponse(content=[book.model_dump() for book in books])


@app.get("/books/{book_id}", response_model=List[Book], tags=["Books"])
async def fetch_book(book_id: str):
    """
    Get the books matching an identifier.

    An unknown identifier yields an empty array rather than 404.
    """
    store = get_db_service()
    try:
        books = await store.get_books_by_id(book_id)
    except Exception as e:
        logger.error("Failed to fetch book", book_id=book_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=STORE_ERROR_MESSAGE
        )

    return JSONResponse(content=[book.model_dump() for book in books])


@app.post(
    "/create",
    response_model=CreateBookResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"]
)
async def create_book(payload: BookIn):
    """Store a new book under a generated identifier."""
    store = get_db_service()
    try:
        book = await store.create_book(payload)
    except Exception as e:
        logger.error("Failed to create book", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=STORE_ERROR_MESSAGE
        )

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=CreateBookResponse(message="Create book success!", id=book.id).model_dump()
    )


@app.put(
    "/books/{book_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"]
)
async def edit_book(book_id: str, payload: BookIn):
    """
    Overwrite a book with the request body.

    The identifier always comes from the path; fields missing from the body
    are reset rather than merged.
    """
    store = get_db_service()
    try:
        updated = await store.replace_book(book_id, payload)
    except Exception as e:
        logger.error("Failed to edit book", book_id=book_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=STORE_ERROR_MESSAGE
        )

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book with ID '{book_id}' not found"
        )

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=MessageResponse(message="Edit book success!").model_dump()
    )


@app.delete("/books/{book_id}", response_model=MessageResponse, tags=["Books"])
async def delete_book(book_id: str):
    """Delete a book."""
    store = get_db_service()
    try:
        deleted = await store.delete_book(book_id)
    except Exception as e:
        logger.error("Failed to delete book", book_id=book_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=STORE_ERROR_MESSAGE
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book with ID '{book_id}' not found"
        )

    return JSONResponse(content=MessageResponse(message="Delete book success!").model_dump())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
