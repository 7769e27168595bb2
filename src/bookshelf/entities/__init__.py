"""Entities module with hybrid entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model and request validation
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .book import Book, BookRepository, BookTable, SqlBookRepository

__all__ = [
    "Book",
    "BookTable",
    "BookRepository",
    "SqlBookRepository",
]
