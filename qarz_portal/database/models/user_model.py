from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from bson import ObjectId


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None


class User(Document):
    cnic: Indexed(str, unique=True) = Field(..., description="National identity card number")
    email: Indexed(EmailStr, unique=True) = Field(..., description="Email address of the user")
    name: str = Field(..., description="Full name of the user")
    hashed_password: str = Field(..., description="Hashed password for the user account")
    phone_number: Optional[str] = Field(None, description="Contact phone number")
    address: Address = Field(default_factory=Address, description="Postal address, used by admin geographic filters")
    is_admin: bool = Field(default=False, description="Administrator flag")
    is_first_login: bool = Field(default=True, description="True until the user changes the initial password")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Timestamp when the user was created")
    updated_at: Optional[datetime] = Field(None, description="Timestamp when the user was last updated")

    class Settings:
        name = "users"

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
        json_encoders = {
            ObjectId: str,
            datetime: lambda v: v.isoformat()
        }
