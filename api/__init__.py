"""
FastAPI RESTful API for the Bookshelf service.

This package provides:
- CRUD endpoints over a single MongoDB collection of books
- Environment-driven configuration
- Health reporting for the backing store
"""
