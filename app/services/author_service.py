from sqlalchemy.orm import Session
from app.core.errors import ServiceError
from app.models.author import Author
from app.repos.author_repo import AuthorRepository
from app.schemas.author import AuthorPartialUpdate, AuthorWrite


class AuthorService:
    @staticmethod
    # Create author
    def create_author(db: Session, data: AuthorWrite) -> Author:
        return AuthorRepository.create(db, data.name, data.bio)

    @staticmethod
    # Get author
    def get_author(db: Session, author_id: int) -> Author:
        return AuthorRepository.get(db, author_id)

    @staticmethod
    # Replace author
    def update_author(db: Session, author_id: int, data: AuthorWrite) -> Author:
        return AuthorRepository.update(db, author_id, data.name, data.bio)

    @staticmethod
    # Patch author
    def partial_update_author(
        db: Session, author_id: int, data: AuthorPartialUpdate
    ) -> Author:
        return AuthorRepository.partial_update(db, author_id, data.to_patch())

    @staticmethod
    # Delete author
    def delete_author(db: Session, author_id: int) -> None:
        AuthorRepository.delete(db, author_id)

    @staticmethod
    # List authors
    def list_authors(db: Session) -> list[Author]:
        authors = AuthorRepository.list(db)
        # An empty table answers 404 rather than an empty list.
        if not authors:
            raise ServiceError.not_found("no authors found")
        return authors
