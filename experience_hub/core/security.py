from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from pydantic import BaseModel

from experience_hub.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_SECRET_KEY
from experience_hub.core.exceptions import AuthenticationException

# JWT settings
ALGORITHM = "HS256"


class AuthContext(BaseModel):
    """Auth context extracted from JWT token"""

    user_id: int
    username: str = ""


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""

    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update(
        {"exp": expire, "iat": datetime.now(timezone.utc), "type": "access"}
    )
    encoded_jwt = jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def create_user_token(user_id: int, username: str) -> str:
    return create_access_token({"sub": str(user_id), "username": username})


def verify_token(token: str) -> dict:
    """Verify and decode a JWT token"""

    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        raise AuthenticationException("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationException("Invalid authentication token")


def create_auth_context(payload: dict) -> AuthContext:
    """Create AuthContext from JWT payload"""

    if payload.get("type") != "access":
        raise AuthenticationException("Invalid authentication token")

    try:
        user_id = int(payload.get("sub", ""))
    except (TypeError, ValueError):
        raise AuthenticationException("Invalid authentication token")

    return AuthContext(user_id=user_id, username=payload.get("username", ""))
