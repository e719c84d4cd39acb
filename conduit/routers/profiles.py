from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.config import settings
from conduit.database import commit, get_db
from conduit.dependencies import get_current_user_id, get_optional_user_id
from conduit.errors import NotFound
from conduit.schemas import ProfileEnvelope
from conduit.services import profile_service

router = APIRouter(prefix=f"{settings.API_PREFIX}/profiles", tags=["profiles"])


@router.get("/{username}", response_model=ProfileEnvelope)
async def get_profile(
    username: str,
    user_id: int | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.get_profile(db, username, user_id)
    if not profile:
        raise NotFound(f"Profile '{username}' not found")
    return ProfileEnvelope(profile=profile)


@router.post("/{username}/follow", response_model=ProfileEnvelope)
async def follow(
    username: str,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.follow_user(db, user_id, username)
    await commit(db)
    return ProfileEnvelope(profile=profile)


@router.delete("/{username}/follow", response_model=ProfileEnvelope)
async def unfollow(
    username: str,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    profile = await profile_service.unfollow_user(db, user_id, username)
    await commit(db)
    return ProfileEnvelope(profile=profile)
