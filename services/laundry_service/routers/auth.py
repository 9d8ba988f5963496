"""Auth router: registration, login, and the current account."""

from fastapi import APIRouter, Depends, Request, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.auth.security import create_access_token
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.laundry_service.schemas import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from services.laundry_service.services import account_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
@auth_limit
async def register(
    request: Request,
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Create a customer or shop-owner account."""
    return await account_service.register_user(db, payload)


@router.post("/login", response_model=TokenResponse)
@auth_limit
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Exchange email + password for a bearer token."""
    user = await account_service.authenticate(db, payload.email, payload.password)
    token = create_access_token(str(user.id), user.role.value, email=user.email)
    return TokenResponse(
        access_token=token, user=UserResponse.model_validate(user)
    )


@router.get("/me", response_model=UserResponse)
async def me(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Return the signed-in account."""
    return await account_service.get_current_account(db, current_user)
