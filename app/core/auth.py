"""
Authentication utilities for bearer-token (JWT) verification.

The web client logs in against the auth service and sends the JWT in the
Authorization header. This module verifies the JWT and extracts user info.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from typing import Optional
from app.core.config import settings

# Security scheme for Bearer token
security = HTTPBearer()


class User:
    """User model extracted from JWT token."""
    def __init__(self, user_id: str, email: Optional[str] = None, role: Optional[str] = None):
        self.id = user_id
        self.email = email
        self.role = role or "user"  # Default role


def verify_token(token: str) -> dict:
    """
    Verify a JWT and return its decoded payload.

    Tokens are signed with the shared secret configured in JWT_SECRET.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options={"verify_aud": True},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    """
    FastAPI dependency to get current authenticated user from JWT token.

    Usage in route:
        @router.get("/overview")
        def overview(current_user: User = Depends(get_current_user)):
            return {"user_id": current_user.id}
    """
    payload = verify_token(credentials.credentials)

    # JWT structure: {"sub": "user_id", "email": "user@example.com", "role": ...}
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate user",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return User(user_id=user_id, email=payload.get("email"), role=payload.get("role"))
