from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.config import settings
from conduit.database import commit, get_db
from conduit.dependencies import get_current_user_id
from conduit.schemas import LoginRequest, NewUserRequest, UpdateUserRequest, UserEnvelope
from conduit.services import user_service

router = APIRouter(prefix=f"{settings.API_PREFIX}/users", tags=["users"])
current_user_router = APIRouter(prefix=f"{settings.API_PREFIX}/user", tags=["users"])


@router.post("", status_code=201, response_model=UserEnvelope)
async def register(data: NewUserRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.register_user(db, data.user)
    await commit(db)
    return UserEnvelope(user=user)


@router.post("/login", status_code=201, response_model=UserEnvelope)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.login(db, data.user)
    await commit(db)
    return UserEnvelope(user=user)


@current_user_router.get("", response_model=UserEnvelope)
async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return UserEnvelope(user=await user_service.get_current_user(db, user_id))


@current_user_router.put("", response_model=UserEnvelope)
async def update_current_user(
    data: UpdateUserRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.update_user(db, user_id, data.user)
    await commit(db)
    return UserEnvelope(user=user)
