"""Query routes: create, read and delete research queries."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from studykit.api.deps import get_query_store
from studykit.core.auth import AuthUser, require_auth
from studykit.schemas.artifacts import ComplexityLevel
from studykit.services.query_store import QueryStore

router = APIRouter()


class CreateQueryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query_text: str = Field(..., alias="queryText", min_length=1, max_length=2000)
    topic: str | None = None
    complexity_level: ComplexityLevel = Field(ComplexityLevel.COLLEGE, alias="complexityLevel")


def _query_body(query) -> dict:
    return {
        "id": query.id,
        "queryText": query.query_text,
        "topic": query.topic,
        "complexityLevel": query.complexity_level,
        "status": query.status,
        "createdAt": query.created_at.isoformat(),
    }


@router.post("", status_code=201)
async def create_query(
    request: CreateQueryRequest,
    user: AuthUser = Depends(require_auth),
    queries: QueryStore = Depends(get_query_store),
) -> dict:
    query = await queries.create(user.user_id, request.query_text, request.topic, request.complexity_level)
    return _query_body(query)


@router.get("/{query_id}")
async def get_query(
    query_id: str,
    user: AuthUser = Depends(require_auth),
    queries: QueryStore = Depends(get_query_store),
) -> dict:
    return _query_body(await queries.get_owned(user.user_id, query_id))


@router.delete("/{query_id}")
async def delete_query(
    query_id: str,
    user: AuthUser = Depends(require_auth),
    queries: QueryStore = Depends(get_query_store),
) -> dict:
    """Delete a query and every artifact derived from it."""
    await queries.delete(user.user_id, query_id)
    return {"success": True}
