"""
Database service layer for the Bookshelf API.

Books are stored one document per record, keyed by the book identifier
(``_id``), so every point operation addresses its document directly.
"""

from typing import Any, Dict, List, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from api.config import APIConfig
from api.models import Book, BookIn, generate_book_id

logger = structlog.get_logger(__name__)


def build_client_options(settings: APIConfig) -> Dict[str, Any]:
    """
    Build keyword arguments for the MongoDB client.

    Args:
        settings: API configuration

    Returns:
        Options to pass to AsyncIOMotorClient alongside the connection URL
    """
    options: Dict[str, Any] = {
        "serverSelectionTimeoutMS": settings.mongodb_timeout_ms,
    }
    if settings.mongodb_tls_certificate_key_file:
        options["tls"] = True
        options["tlsCertificateKeyFile"] = settings.mongodb_tls_certificate_key_file
    return options


class BookStore:
    """Database service for book operations."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    def _decode(self, document: Dict[str, Any]) -> Optional[Book]:
        """Decode a document, or return None when it does not fit the Book shape."""
        try:
            return Book.from_document(document)
        except (KeyError, ValidationError) as e:
            logger.warning(
                "Skipping undecodable book document",
                document_id=str(document.get("_id")),
                error=str(e)
            )
            return None

    async def list_books(self) -> List[Book]:
        """
        Get every book in the collection.

        Documents that cannot be decoded are skipped; a store error aborts
        the scan.

        Returns:
            List of books in store order
        """
        books = []
        try:
            async for document in self.collection.find({}):
                book = self._decode(document)
                if book is not None:
                    books.append(book)
        except Exception as e:
            logger.error("Failed to list books", error=str(e))
            raise

        logger.debug("Listed books", count=len(books))
        return books

    async def get_books_by_id(self, book_id: str) -> List[Book]:
        """
        Get the books matching an identifier.

        Args:
            book_id: Book identifier

        Returns:
            List with the matching book, empty when there is none
        """
        books = []
        try:
            async for document in self.collection.find({"_id": book_id}):
                book = self._decode(document)
                if book is not None:
                    books.append(book)
        except Exception as e:
            logger.error("Failed to get book by ID", book_id=book_id, error=str(e))
            raise

        return books

    async def create_book(self, payload: BookIn) -> Book:
        """
        Store a new book under a freshly generated identifier.

        Args:
            payload: Client-supplied book fields

        Returns:
            The stored book, including its identifier
        """
        book = Book(id=generate_book_id(), **payload.model_dump())
        try:
            await self.collection.insert_one(book.to_document())
        except DuplicateKeyError:
            logger.error("Generated book ID already exists", book_id=book.id)
            raise
        except Exception as e:
            logger.error("Failed to create book", book_id=book.id, error=str(e))
            raise

        logger.info("Created book", book_id=book.id)
        return book

    async def replace_book(self, book_id: str, payload: BookIn) -> bool:
        """
        Overwrite a stored book with a new payload.

        Fields missing from the payload are not carried over from the stored
        document.

        Args:
            book_id: Identifier of the book to overwrite
            payload: Client-supplied book fields

        Returns:
            True if the book existed and was overwritten, False otherwise
        """
        book = Book(id=book_id, **payload.model_dump())
        try:
            result = await self.collection.replace_one({"_id": book_id}, book.to_document())
        except Exception as e:
            logger.error("Failed to edit book", book_id=book_id, error=str(e))
            raise

        if result.matched_count == 0:
            logger.info("Book to edit not found", book_id=book_id)
            return False

        logger.info("Edited book", book_id=book_id)
        return True

    async def delete_book(self, book_id: str) -> bool:
        """
        Delete a stored book.

        Args:
            book_id: Identifier of the book to delete

        Returns:
            True if the book existed and was deleted, False otherwise
        """
        try:
            result = await self.collection.delete_one({"_id": book_id})
        except Exception as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise

        if result.deleted_count == 0:
            logger.info("Book to delete not found", book_id=book_id)
            return False

        logger.info("Deleted book", book_id=book_id)
        return True

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.collection.database.command("ping")
            books_count = await self.collection.count_documents({})

            return {
                "status": "healthy",
                "books_collection": "accessible",
                "books_count": books_count
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
