import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
import jwt
from pydantic import ValidationError

from .schemas.user import AdminIdentity, TokenData
from ..config.config import settings

logger = logging.getLogger(__name__)

# Tokens are issued by the external auth service; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> AdminIdentity:
    """
    Decodes the bearer token, validates its payload with pydantic and returns
    the verified caller.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        token_data = TokenData.model_validate(payload)
    except (jwt.PyJWTError, ValidationError) as e:
        # Covers expired or badly signed tokens and malformed payloads alike.
        logger.warning(f"Token validation error: {e}")
        raise credentials_exception

    if token_data.sub is None:
        logger.warning("Token is valid but missing 'sub'.")
        raise credentials_exception

    return AdminIdentity(id=token_data.sub, email=token_data.email)
