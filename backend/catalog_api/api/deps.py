from typing import Callable, Iterable, Optional, Type, TypeVar

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.core.exceptions import AuthenticationException, PermissionDeniedException
from catalog_api.core.security import Capability, Role, decode_access_token, has_capability
from catalog_api.dependencies import get_db
from catalog_api.models.user import User
from catalog_api.utils.ids import parse_id

security = HTTPBearer(auto_error=False)

ModelT = TypeVar("ModelT", bound=BaseModel)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency to resolve the bearer token to a persisted user.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationException()

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationException()

    user_id = parse_id(payload.get("sub"))
    if user_id is None:
        raise AuthenticationException()

    stmt = select(User).where(User.id == user_id)
    result = await db.execute(stmt)
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise AuthenticationException("No user found with this token")

    return user


def authorize(user: User, roles: Iterable[Role]) -> None:
    """Raise PermissionDeniedException unless the user's role is in ``roles``."""
    if user.role not in set(roles):
        raise PermissionDeniedException(user.role.value if isinstance(user.role, Role) else str(user.role))


def require_capability(capability: Capability) -> Callable:
    """Dependency factory: authenticated user whose role grants ``capability``."""
    allowed = [role for role in Role if has_capability(role, capability)]

    async def _dependency(current_user: User = Depends(get_current_user)) -> User:
        authorize(current_user, allowed)
        return current_user

    return _dependency


async def read_body(request: Request, model: Type[ModelT]) -> ModelT:
    """
    Parse the JSON body into ``model`` inside the endpoint, so that auth
    dependencies have already run and rejected the caller if needed.
    """
    try:
        data = await request.json()
    except ValueError:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": None}]
        )
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in e.errors()]
        )
