from collections.abc import Iterator
from contextlib import contextmanager
from typing import cast
from sqlalchemy import delete, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ServiceError
from app.core.logging import get_logger
from app.models.author import Author
from app.schemas.author import AuthorPatch

logger = get_logger(__name__)

DATABASE_UNAVAILABLE = "database unavailable"


def _not_found(author_id: int) -> ServiceError:
    return ServiceError.not_found(f"author {author_id} not found")


@contextmanager
def _classify_errors(db: Session, operation: str) -> Iterator[None]:
    """Anything the driver raises is reported as the database being unavailable."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("%s failed: %s", operation, exc)
        # Driver text carries SQL and bound values; it stays in the log only.
        raise ServiceError.unavailable(DATABASE_UNAVAILABLE) from exc


class AuthorRepository:

    @staticmethod
    # Create a new author
    def create(db: Session, name: str, bio: str) -> Author:
        with _classify_errors(db, "create author"):
            author = Author(name=name, bio=bio)
            db.add(author)
            db.commit()
            return author

    @staticmethod
    # Get an author by id
    def get(db: Session, author_id: int) -> Author:
        with _classify_errors(db, "get author"):
            author = db.scalars(select(Author).where(Author.id == author_id)).first()
        if author is None:
            raise _not_found(author_id)
        return author

    @staticmethod
    # Replace name and bio
    def update(db: Session, author_id: int, name: str, bio: str) -> Author:
        with _classify_errors(db, "update author"):
            stmt = (
                update(Author)
                .where(Author.id == author_id)
                .values(name=name, bio=bio)
                .returning(Author)
            )
            author = db.scalars(stmt).one_or_none()
            if author is None:
                db.rollback()
                raise _not_found(author_id)
            db.commit()
            return author

    @staticmethod
    # Replace only the fields set in the patch
    def partial_update(db: Session, author_id: int, patch: AuthorPatch) -> Author:
        values = patch.changes()
        if not values:
            return AuthorRepository.get(db, author_id)

        with _classify_errors(db, "partial update author"):
            stmt = (
                update(Author)
                .where(Author.id == author_id)
                .values(**values)
                .returning(Author)
            )
            author = db.scalars(stmt).one_or_none()
            if author is None:
                db.rollback()
                raise _not_found(author_id)
            db.commit()
            return author

    @staticmethod
    # Delete an author by id
    def delete(db: Session, author_id: int) -> None:
        with _classify_errors(db, "delete author"):
            result = db.execute(
                delete(Author).where(Author.id == author_id),
                execution_options={"synchronize_session": False},
            )
            deleted = cast(CursorResult[object], result).rowcount
            if deleted == 0:
                db.rollback()
                raise _not_found(author_id)
            db.commit()

    @staticmethod
    # List authors
    def list(db: Session) -> list[Author]:
        with _classify_errors(db, "list authors"):
            stmt = select(Author).order_by(Author.id.asc())
            return list(db.scalars(stmt).all())

    @staticmethod
    # Remove every author; used to reset state between tests
    def truncate(db: Session) -> None:
        with _classify_errors(db, "truncate authors"):
            _ = db.execute(
                delete(Author), execution_options={"synchronize_session": False}
            )
            db.commit()
