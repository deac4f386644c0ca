from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from typing import Dict
import logging

from qarz_portal.core.security import decode_token
from qarz_portal.services.auth_service import auth_service

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

# Extracts and validates JWT token to retrieve current authenticated user
async def get_current_user(token: str = Depends(oauth2_scheme)) -> Dict:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if payload is None:
        logger.warning("Token validation failed")
        raise credentials_exception

    email = payload.get("sub")
    if email is None:
        logger.debug("No 'sub' field in token payload.")
        raise credentials_exception

    user = await auth_service.get_user_by_email(email)
    if user is None:
        raise credentials_exception

    return user

# Validates that the current user has admin privileges
async def get_admin_user(current_user: Dict = Depends(get_current_user)) -> Dict:
    if not current_user.get("isAdmin"):
        logger.warning("Non-admin user %s attempted an admin operation", current_user.get("id"))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required"
        )
    return current_user
