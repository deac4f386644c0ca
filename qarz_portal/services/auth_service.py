from fastapi import HTTPException, status
from beanie import PydanticObjectId
from typing import Dict, Optional
from datetime import datetime
import logging

from qarz_portal.database.models import User, Address
from qarz_portal.schemas import UserCreate, ProfileUpdate, PasswordChange
from qarz_portal.core import hash_password, verify_password, create_access_token, is_valid_password
from qarz_portal.helpers.response_builder import build_user_summary

logger = logging.getLogger(__name__)


class AuthService:
    # Register a new applicant account
    @staticmethod
    async def register_user(user_data: UserCreate) -> Dict:
        email = user_data.email.lower()
        cnic = user_data.cnic.strip()

        if await User.find_one(User.email == email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        if await User.find_one(User.cnic == cnic):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="CNIC already registered"
            )

        if not is_valid_password(user_data.password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Password must be at least 6 characters long"
            )

        try:
            hashed_password = hash_password(user_data.password)
        except ValueError:
            logger.warning("Password hashing failed")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid password format"
            )

        address = Address(**user_data.address.model_dump()) if user_data.address else Address()
        new_user = User(
            cnic=cnic,
            email=email,
            name=user_data.name.strip(),
            hashed_password=hashed_password,
            phone_number=user_data.phone_number,
            address=address,
            created_at=datetime.utcnow()
        )

        try:
            await new_user.insert()
            logger.info("User registered with ID: %s", new_user.id)
        except Exception as e:
            logger.error("User save failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="User registration failed"
            )

        return {
            "id": str(new_user.id),
            "email": new_user.email,
            "name": new_user.name,
            "cnic": new_user.cnic,
            "message": "User registered successfully"
        }

    # Authenticate user and generate access token
    @staticmethod
    async def login_user(email: str, password: str) -> Dict:
        logger.debug("Login attempt for email: %s", email)

        user = await User.find_one(User.email == email.lower())
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Failed login for email: %s", email)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        try:
            access_token = create_access_token(data={"sub": user.email})
            logger.debug("Created JWT access token for sub: %s", user.email)
        except ValueError as e:
            logger.error("Token creation failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not create access token"
            )

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user": build_user_summary(user)
        }

    # Retrieve user information by email address
    @staticmethod
    async def get_user_by_email(email: str) -> Optional[Dict]:
        user = await User.find_one(User.email == email)
        if not user:
            return None
        return build_user_summary(user)

    @staticmethod
    async def _get_user_document(user_id: str) -> User:
        user = await User.get(PydanticObjectId(user_id))
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    # Replace the password after checking the current one
    async def change_password(self, user_id: str, payload: PasswordChange) -> Dict:
        user = await self._get_user_document(user_id)

        if not verify_password(payload.current_password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect"
            )

        try:
            user.hashed_password = hash_password(payload.new_password)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        user.is_first_login = False
        user.updated_at = datetime.utcnow()
        await user.save()
        logger.info("Password changed for user %s", user_id)
        return {"message": "Password changed successfully"}

    # Update name, phone and address; omitted fields stay as they are
    async def update_profile(self, user_id: str, payload: ProfileUpdate) -> Dict:
        user = await self._get_user_document(user_id)

        if payload.name is not None:
            if not payload.name.strip():
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name cannot be empty")
            user.name = payload.name.strip()
        if payload.phone_number is not None:
            user.phone_number = payload.phone_number
        if payload.address is not None:
            current = user.address.model_dump()
            current.update(payload.address.model_dump(exclude_none=True))
            user.address = Address(**current)

        user.updated_at = datetime.utcnow()
        await user.save()
        logger.info("Profile updated for user %s", user_id)
        return build_user_summary(user)


auth_service = AuthService()
