from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from enum import Enum
from datetime import date
from typing import List, Optional


class LoanCategoryEnum(str, Enum):
    wedding = "Wedding Loans"
    home_construction = "Home Construction Loans"
    business_startup = "Business Startup Loans"
    education = "Education Loans"


class LoanStatusEnum(str, Enum):
    pending = "pending"
    under_review = "under-review"
    approved = "approved"
    rejected = "rejected"
    completed = "completed"


class CamelModel(BaseModel):
    """Base for request bodies that arrive in camelCase from the web client."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LoanCalculationRequest(CamelModel):
    category: str
    loan_amount: float = Field(..., ge=0)
    initial_deposit: float = Field(0, ge=0)
    period_months: int = Field(..., gt=0)


class LoanRequestCreate(CamelModel):
    """Body for submitting a new loan request."""
    category: str
    subcategory: str
    loan_amount: float = Field(..., ge=0)
    loan_period: int = Field(..., gt=0, description="Term in months")
    initial_deposit: float = Field(0, ge=0)
    additional_info: Optional[str] = None


class GuarantorCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    cnic: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    phone_number: Optional[str] = None

    @field_validator("name", "cnic", "location")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class GuarantorsRequest(CamelModel):
    # Count is checked by the service so the caller gets a 400, not a 422
    guarantors: List[GuarantorCreate] = Field(default_factory=list)


class DocumentUpdate(BaseModel):
    """One nullable slot per uploadable document; None leaves the stored value alone."""
    profile_photo: Optional[str] = None
    cnic_front: Optional[str] = None
    cnic_back: Optional[str] = None

    def provided(self) -> dict:
        return {k: v for k, v in self.model_dump().items() if v is not None}


class TokenAssignmentRequest(CamelModel):
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = None
    office_location: Optional[str] = None
    # Checked by the service so an unknown status is a 400 like the status endpoint
    status: Optional[str] = None
