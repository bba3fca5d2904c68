from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from experience_hub.components.users.crud import UsersCRUD
from experience_hub.components.users.models import Users
from experience_hub.core.exceptions import AuthenticationException
from experience_hub.core.security import (
    AuthContext,
    create_auth_context,
    verify_token,
)
from experience_hub.database.session import get_db

# Missing credentials are reported through AuthenticationException so the
# 401 body has the same shape as every other error
security = HTTPBearer(auto_error=False)


async def get_current_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthContext:
    """Extract and validate auth context from JWT token"""
    if not credentials or not credentials.credentials:
        raise AuthenticationException()

    payload = verify_token(credentials.credentials)

    return create_auth_context(payload)


async def get_current_user(
    auth: AuthContext = Depends(get_current_auth),
    db: Session = Depends(get_db),
) -> Users:
    """Resolve the verified caller; tokens of soft-deleted users are refused"""
    user = UsersCRUD(db).get_active_by_id(auth.user_id)

    if not user:
        raise AuthenticationException("User account is not active")

    return user
