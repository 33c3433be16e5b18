from dataclasses import dataclass
from typing import Annotated, ClassVar, Generic, TypeVar
from pydantic import BaseModel, ConfigDict, Field

NAME_MAX_LENGTH = 32

T = TypeVar("T")


@dataclass(frozen=True)
class Unchanged:
    """Field left at its stored value."""


@dataclass(frozen=True)
class SetTo(Generic[T]):
    """Field replaced by `value` (which may be an empty string)."""
    value: T


UNCHANGED = Unchanged()

FieldUpdate = Unchanged | SetTo[str]


@dataclass(frozen=True)
class AuthorPatch:
    name: FieldUpdate = UNCHANGED
    bio: FieldUpdate = UNCHANGED

    def changes(self) -> dict[str, str]:
        """Column values to write, one entry per SetTo field."""
        values: dict[str, str] = {}
        for column in ("name", "bio"):
            update = getattr(self, column)
            if isinstance(update, SetTo):
                values[column] = update.value
        return values


# Author create / full update schema
class AuthorWrite(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=NAME_MAX_LENGTH)]
    bio: Annotated[str, Field(min_length=1)]


# Author partial update schema; null counts as omitted
class AuthorPartialUpdate(BaseModel):
    name: Annotated[str | None, Field(max_length=NAME_MAX_LENGTH)] = None
    bio: str | None = None

    def to_patch(self) -> AuthorPatch:
        return AuthorPatch(
            name=UNCHANGED if self.name is None else SetTo(self.name),
            bio=UNCHANGED if self.bio is None else SetTo(self.bio),
        )


# Author read schema
class AuthorRead(BaseModel):
    id: int = Field(serialization_alias="ID")
    name: str
    bio: str

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)
