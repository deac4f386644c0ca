from pydantic import BaseModel, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class AddressSchema(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserCreate(BaseModel):
    cnic: str = Field(..., min_length=1, description="National identity card number")
    email: EmailStr = Field(..., description="Email address of the user")
    name: str = Field(..., min_length=1, description="Full name of the user")
    password: str = Field(..., min_length=6, description="Password for the user account")
    phone_number: Optional[str] = None
    address: Optional[AddressSchema] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[AddressSchema] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserResponse(BaseModel):
    id: str = Field(..., description="Unique identifier for the user")
    email: EmailStr
    name: str
    cnic: str
    message: Optional[str] = None


class Token(BaseModel):
    access_token: str = Field(..., description="Access token for the user")
    token_type: str = Field(default="bearer", description="Type of the token")
    user: Optional[dict] = None
