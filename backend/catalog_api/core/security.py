import enum
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, FrozenSet, Mapping, Optional

import bcrypt
from jose import JWTError, jwt

from catalog_api.core.config import settings


class Role(str, enum.Enum):
    admin = "admin"
    user = "user"


class Capability(str, enum.Enum):
    manage_catalog = "manage_catalog"
    upload_media = "upload_media"


ROLE_CAPABILITIES: Mapping[Role, FrozenSet[Capability]] = {
    Role.admin: frozenset({Capability.manage_catalog, Capability.upload_media}),
    Role.user: frozenset(),
}


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims: Dict[str, Any] = dict(extra_claims or {})
    claims.update({"sub": subject, "exp": expire})
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the token claims, or None if the signature, expiry or format is bad."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
