from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from typing import Dict
import logging

from qarz_portal.services.auth_service import auth_service
from qarz_portal.services.audit_service import audit_service
from qarz_portal.schemas import UserCreate, UserResponse, Token, ProfileUpdate, PasswordChange
from qarz_portal.core.auth_dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

# Registers a new applicant account
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate) -> UserResponse:
    try:
        created_user = await auth_service.register_user(user_data)
        await audit_service.record(action="register", actor=created_user.get("email"), acted=created_user.get("id"))
        return UserResponse(**created_user)
    except HTTPException:
        await audit_service.record(action="register", actor=user_data.email, status="failed")
        raise
    except Exception:
        logger.exception("Unexpected error during registration")
        await audit_service.record(action="register", actor=user_data.email, status="failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during registration"
        )

# Authenticates user credentials and returns an access token
@router.post("/login", response_model=Token, status_code=status.HTTP_200_OK)
async def login_user(form_data: OAuth2PasswordRequestForm = Depends()) -> Token:
    try:
        token_data = await auth_service.login_user(form_data.username, form_data.password)
        await audit_service.record(action="login", actor=form_data.username)
        return Token(**token_data)
    except HTTPException:
        await audit_service.record(action="login", actor=form_data.username, status="failed")
        raise
    except Exception:
        logger.exception("Unexpected error during login")
        await audit_service.record(action="login", actor=form_data.username, status="failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during login"
        )

# Retrieves the authenticated user's profile information
@router.get("/profile", status_code=status.HTTP_200_OK)
async def get_profile(current_user: Dict = Depends(get_current_user)) -> Dict:
    return current_user

# Updates name, phone number and address of the authenticated user
@router.put("/profile", status_code=status.HTTP_200_OK)
async def update_profile(payload: ProfileUpdate, current_user: Dict = Depends(get_current_user)) -> Dict:
    user = await auth_service.update_profile(current_user["id"], payload)
    return {"message": "Profile updated successfully", "user": user}

# Changes the password and clears the first-login flag
@router.post("/change-password", status_code=status.HTTP_200_OK)
async def change_password(payload: PasswordChange, current_user: Dict = Depends(get_current_user)) -> Dict:
    return await auth_service.change_password(current_user["id"], payload)
