from qarz_portal.schemas.user_schemas import (
    AddressSchema,
    UserCreate,
    ProfileUpdate,
    PasswordChange,
    UserResponse,
    Token,
)
from qarz_portal.schemas.loan_schema import (
    LoanCategoryEnum,
    LoanStatusEnum,
    LoanCalculationRequest,
    LoanRequestCreate,
    GuarantorCreate,
    GuarantorsRequest,
    DocumentUpdate,
    TokenAssignmentRequest,
)
