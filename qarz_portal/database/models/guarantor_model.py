from beanie import Document, PydanticObjectId
from pydantic import Field
from datetime import datetime
from typing import Optional


class Guarantor(Document):
    loan_request_id: PydanticObjectId = Field(..., description="Loan request this guarantor vouches for")
    name: str = Field(..., description="Full name of the guarantor")
    email: str = Field(..., description="Email address, stored lower-cased")
    cnic: str = Field(..., description="National identity card number of the guarantor")
    location: str = Field(..., description="City or area where the guarantor lives")
    phone_number: Optional[str] = Field(None, description="Contact phone number")
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "guarantors"
