from sqlalchemy import BigInteger, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base

#Author
class Author(Base):
    __tablename__: str = "authors"
    # keep sqlite from reusing the ids of deleted rows
    __table_args__: dict[str, object] = {"sqlite_autoincrement": True}
    # BIGSERIAL on postgres; sqlite only auto-increments INTEGER primary keys
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    bio: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"Author(id={self.id!r}, name={self.name!r})"
