from typing import Annotated, Awaitable, Callable, TypeVar
from fastapi import APIRouter, Depends, Path, Request, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session
from starlette.status import HTTP_200_OK, HTTP_201_CREATED
from app.db.session import get_db
from app.services.author_service import AuthorService
from app.schemas.author import AuthorPartialUpdate, AuthorRead, AuthorWrite
from app.core.logging import get_logger

router = APIRouter(prefix="/authors", tags=["authors"])

M = TypeVar("M", bound=BaseModel)


def json_body(model: type[M]) -> Callable[[Request], Awaitable[M]]:
    """Parse the raw request body as JSON whatever the Content-Type says."""

    async def parse(request: Request) -> M:
        raw = await request.body()
        try:
            return model.model_validate_json(raw)
        except ValidationError as exc:
            errors = [
                {**err, "loc": ("body", *err["loc"])}
                for err in exc.errors(include_url=False)
            ]
            raise RequestValidationError(errors, body=raw) from exc

    return parse


def author_id_param(author_id: Annotated[int, Path(ge=-(2**63), le=2**63 - 1)]) -> int:
    # BIGINT range; 0 is never a stored id. Negatives reach the query and 404.
    if author_id == 0:
        raise RequestValidationError(
            [
                {
                    "type": "value_error",
                    "loc": ("path", "author_id"),
                    "msg": "Value error, must not be zero",
                    "input": author_id,
                }
            ]
        )
    return author_id


AuthorId = Annotated[int, Depends(author_id_param)]
DB = Annotated[Session, Depends(get_db)]
WriteBody = Annotated[AuthorWrite, Depends(json_body(AuthorWrite))]
PatchBody = Annotated[AuthorPartialUpdate, Depends(json_body(AuthorPartialUpdate))]


@router.post("", response_model=AuthorRead, status_code=HTTP_201_CREATED)
def create_author(request: Request, data: WriteBody, db: DB):
    author = AuthorService.create_author(db, data)
    get_logger(__name__, request).info("Created author %d", author.id)
    return author


@router.get("/{author_id}", response_model=AuthorRead)
def get_author(author_id: AuthorId, db: DB):
    return AuthorService.get_author(db, author_id)


@router.put("/{author_id}", response_model=AuthorRead)
def update_author(request: Request, author_id: AuthorId, data: WriteBody, db: DB):
    author = AuthorService.update_author(db, author_id, data)
    get_logger(__name__, request).info("Updated author %d", author_id)
    return author


@router.patch("/{author_id}", response_model=AuthorRead)
def partial_update_author(request: Request, author_id: AuthorId, data: PatchBody, db: DB):
    author = AuthorService.partial_update_author(db, author_id, data)
    get_logger(__name__, request).info(
        "Patched author %d (fields: %s)", author_id, sorted(data.model_fields_set) or "-"
    )
    return author


@router.delete("/{author_id}", status_code=HTTP_200_OK, response_class=Response)
def delete_author(request: Request, author_id: AuthorId, db: DB) -> Response:
    AuthorService.delete_author(db, author_id)
    get_logger(__name__, request).info("Deleted author %d", author_id)
    return Response(status_code=HTTP_200_OK)


@router.get("", response_model=list[AuthorRead])
def list_authors(request: Request, db: DB):
    logger = get_logger(__name__, request)
    logger.info("Listing authors")
    return AuthorService.list_authors(db)
