from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.api.deps import get_current_user
from catalog_api.core.security import create_access_token
from catalog_api.dependencies import get_db
from catalog_api.models.user import User
from catalog_api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, Token, UserRead, UserResponse
from catalog_api.services.user_service import user_service

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(subject=str(user.id), extra_claims={"role": user.role.value})
    return AuthResponse(token=Token(access_token=token), user=UserRead.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """
    Register a new account. New accounts always get the ``user`` role.
    """
    user = await user_service.register_user(
        db,
        email=request.email,
        password=request.password,
        full_name=request.full_name,
    )
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """
    Login endpoint - returns a JWT bearer token.
    """
    user = await user_service.authenticate(db, request.email, request.password)
    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse(data=UserRead.model_validate(current_user))
