"""
Tag API endpoints.

Tags are registered automatically when they are first used on a line item.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardkeeper.db import list_tags
from cardkeeper.db.database import get_session

router = APIRouter(prefix="/tags", tags=["tags"])


class TagsResponse(BaseModel):
    tags: list[str] = Field(default_factory=list)


@router.get("", response_model=TagsResponse)
async def get_tags(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TagsResponse:
    """All tag labels ever used on a line item, sorted."""
    return TagsResponse(tags=await list_tags(session))
