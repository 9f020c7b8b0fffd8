"""
Admin user management endpoints.

Every route requires the `admin` role.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_pagination_params, require_admin
from api.schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from api.schemas.users import UserCreate, UserResponse, UserUpdate
from api.services import users as user_service
from database.engine import get_db

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("/users", response_model=PaginatedResponse[UserResponse], summary="List Users")
async def list_users(
    pagination: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db),
):
    users, total = await user_service.list_users(
        db, limit=pagination.page_size, offset=pagination.offset
    )
    return PaginatedResponse.create(
        [UserResponse.model_validate(u) for u in users], total, pagination
    )


@router.get("/users/active", response_model=list[UserResponse], summary="List Active Users")
async def list_active_users(db: AsyncSession = Depends(get_db)):
    return await user_service.get_active_users(db)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    return await user_service.create_user(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        is_active=body.is_active,
    )


@router.get("/users/{user_id}", response_model=UserResponse, summary="Get User")
async def get_user(
    user_id: int = Path(..., description="User ID"),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, user_id)


@router.put("/users/{user_id}", response_model=UserResponse, summary="Update User")
async def update_user(
    body: UserUpdate,
    user_id: int = Path(..., description="User ID"),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_user(db, user_id, body.model_dump(exclude_unset=True))


@router.delete("/users/{user_id}", response_model=MessageResponse, summary="Delete User")
async def delete_user(
    user_id: int = Path(..., description="User ID"),
    db: AsyncSession = Depends(get_db),
):
    await user_service.delete_user(db, user_id)
    return MessageResponse(message="User deleted successfully")
