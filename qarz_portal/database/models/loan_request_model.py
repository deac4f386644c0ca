from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field
from pymongo import IndexModel, ASCENDING, DESCENDING
from typing import Optional, List
from datetime import datetime

from qarz_portal.schemas.loan_schema import LoanCategoryEnum, LoanStatusEnum


class LoanDocuments(BaseModel):
    profile_photo: Optional[str] = None
    cnic_front: Optional[str] = None
    cnic_back: Optional[str] = None
    salary_sheet: Optional[str] = None
    statement: Optional[str] = None


class LoanRequest(Document):
    user_id: PydanticObjectId = Field(..., description="Applicant who owns the request")
    category: LoanCategoryEnum = Field(..., description="Loan category from the catalog")
    subcategory: str = Field(..., description="Subcategory within the category")
    loan_amount: float = Field(..., ge=0, description="Requested amount")
    loan_period: int = Field(..., gt=0, description="Term in months")
    initial_deposit: float = Field(0, ge=0, description="Amount paid up front")
    monthly_installment: int = Field(..., ge=0, description="ceil((loan_amount - initial_deposit) / loan_period)")
    status: LoanStatusEnum = Field(default=LoanStatusEnum.pending, description="Lifecycle status")

    token_number: Optional[str] = Field(None, description="Unique review token, immutable once assigned")
    appointment_date: Optional[datetime] = None
    appointment_time: Optional[str] = None
    office_location: Optional[str] = None

    guarantors: List[PydanticObjectId] = Field(default_factory=list)
    documents: LoanDocuments = Field(default_factory=LoanDocuments)
    additional_info: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "loan_requests"
        indexes = [
            IndexModel([("user_id", ASCENDING), ("created_at", DESCENDING)]),
            IndexModel([("status", ASCENDING)]),
            # Unassigned requests have no token; only string tokens take part in uniqueness
            IndexModel(
                [("token_number", ASCENDING)],
                unique=True,
                partialFilterExpression={"token_number": {"$type": "string"}},
                name="token_number_unique",
            ),
        ]
