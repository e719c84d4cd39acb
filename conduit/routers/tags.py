from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.config import settings
from conduit.database import get_db
from conduit.schemas import TagList
from conduit.services import article_service

router = APIRouter(prefix=f"{settings.API_PREFIX}/tags", tags=["tags"])


@router.get("", response_model=TagList)
async def list_tags(db: AsyncSession = Depends(get_db)):
    return TagList(tags=await article_service.list_tags(db))
