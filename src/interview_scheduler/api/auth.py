"""Bearer-token verification for tokens issued by the identity provider."""

from __future__ import annotations

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from interview_scheduler.api.deps import Services, get_services

JWT_ALGORITHM = "HS256"

_bearer_scheme = HTTPBearer()


def decode_token(token: str, secret: str) -> dict:
    return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    services: Services = Depends(get_services),
) -> dict:
    """Decode JWT from Authorization header and return the staff user."""
    try:
        payload = decode_token(credentials.credentials, services.config.jwt_secret)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    if not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return {"id": payload["sub"], "email": payload.get("email", "")}
