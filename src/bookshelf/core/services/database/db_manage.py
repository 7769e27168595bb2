"""Schema management and sample data for the books table."""

from loguru import logger
from sqlalchemy import func
from sqlmodel import SQLModel, select

from src.bookshelf.core.services.book_service import BookService
from src.bookshelf.core.services.database.db_session import DbSessionService
from src.bookshelf.entities.book import Book, BookCreate, BookTable, SqlBookRepository

SAMPLE_BOOKS = (
    BookCreate(title="The Go Programming Language", author="Alan Donovan", year=2015),
    BookCreate(title="Clean Code", author="Robert Martin", year=2008),
    BookCreate(title="Design Patterns", author="Gang of Four", year=1994),
)


class DbManageService:
    def __init__(self, database_service: DbSessionService):
        self._database_service = database_service

    def create_all(self) -> None:
        """Create all database tables."""
        SQLModel.metadata.create_all(self._database_service.engine, tables=[BookTable.__table__])
        logger.info("Database initialized with tables.")

    def drop_all(self) -> None:
        SQLModel.metadata.drop_all(self._database_service.engine, tables=[BookTable.__table__])
        logger.warning("Dropped books table")

    def seed(self, only_if_empty: bool = True) -> list[Book]:
        """Insert the sample books.

        Returns the books that were inserted; nothing is inserted when
        ``only_if_empty`` is set and the table already has rows.
        """
        with self._database_service.session_scope() as session:
            if only_if_empty:
                existing = session.exec(select(func.count()).select_from(BookTable)).one()
                if existing:
                    logger.info("Skipping seed; {} books already present", existing)
                    return []

            service = BookService(SqlBookRepository(session))
            created = [service.create_book(request) for request in SAMPLE_BOOKS]

        logger.info("Seeded {} sample books", len(created))
        return created
