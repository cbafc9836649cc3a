"""
Bearer token handling.
The identity provider issues the tokens; the core only checks the signature,
the expiry and the token type, then reads the user_id claim.
"""
from datetime import datetime, timedelta
from typing import Optional
import uuid

import jwt

from hirelocal.config import settings

ACCESS = "access"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign an access token the way the identity provider does.
    Used by tests and local tooling.
    """
    issued = datetime.utcnow()
    claims = dict(data)
    claims.update({
        "exp": issued + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
        "iat": issued,
        "type": ACCESS,
        "jti": str(uuid.uuid4()),
    })
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str, token_type: str = ACCESS) -> Optional[dict]:
    """
    Decode a token and check its type.

    Returns:
        The claims, or None when the token is expired, tampered with or of
        the wrong type
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload
