from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from typing import Any, Dict, List, Optional
import logging

from qarz_portal.core.auth_dependencies import get_current_user
from qarz_portal.schemas.loan_schema import GuarantorsRequest, LoanCalculationRequest, LoanRequestCreate
from qarz_portal.services.loan_service import loan_request_service
from qarz_portal.services.slip_service import slip_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/loan", tags=["Loan Requests"])


# Returns the loan category catalog
@router.get("/categories")
async def get_loan_categories() -> Dict[str, Any]:
    return loan_request_service.get_categories()


# Calculates the monthly installment for an estimate
@router.post("/calculate")
async def calculate_loan_estimate(payload: LoanCalculationRequest) -> Dict[str, Any]:
    return loan_request_service.calculate(payload)


# Submits a new loan request in pending status
@router.post("/request", status_code=status.HTTP_201_CREATED)
async def create_loan_request(
    payload: LoanRequestCreate,
    current_user: Dict = Depends(get_current_user)
) -> Dict[str, Any]:
    try:
        loan_request = await loan_request_service.create_loan_request(payload, current_user)
        return {"message": "Loan request created successfully", "loanRequest": loan_request}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error creating loan request")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while creating the loan request"
        )


# Attaches the two guarantors to a loan request
@router.post("/request/{loan_request_id}/guarantors")
async def add_guarantors(
    loan_request_id: str,
    payload: GuarantorsRequest,
    current_user: Dict = Depends(get_current_user)
) -> Dict[str, Any]:
    try:
        loan_request = await loan_request_service.add_guarantors(loan_request_id, payload.guarantors, current_user)
        return {"message": "Guarantors added successfully", "loanRequest": loan_request}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error adding guarantors to loan request %s", loan_request_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while adding guarantors"
        )


# Uploads the profile photo and CNIC images for a loan request
@router.post("/request/{loan_request_id}/documents")
async def upload_documents(
    loan_request_id: str,
    profilePhoto: Optional[UploadFile] = File(None),
    cnicFront: Optional[UploadFile] = File(None),
    cnicBack: Optional[UploadFile] = File(None),
    current_user: Dict = Depends(get_current_user)
) -> Dict[str, Any]:
    files = {
        "profilePhoto": profilePhoto,
        "cnicFront": cnicFront,
        "cnicBack": cnicBack,
    }
    try:
        loan_request = await loan_request_service.attach_documents(loan_request_id, files, current_user)
        return {"message": "Documents uploaded successfully", "loanRequest": loan_request}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error uploading documents for loan request %s", loan_request_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while uploading documents"
        )


# Lists the caller's own loan requests
@router.get("/requests")
async def get_user_loan_requests(current_user: Dict = Depends(get_current_user)) -> List[Dict[str, Any]]:
    try:
        return await loan_request_service.get_user_loan_requests(current_user)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error retrieving loan requests")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while retrieving loan requests"
        )


# Retrieves one loan request (owner or administrator)
@router.get("/request/{loan_request_id}")
async def get_loan_request(
    loan_request_id: str,
    current_user: Dict = Depends(get_current_user)
) -> Dict[str, Any]:
    try:
        return await loan_request_service.get_loan_request(loan_request_id, current_user)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error retrieving loan request %s", loan_request_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error retrieving loan request"
        )


# Produces the appointment slip once a token has been assigned
@router.get("/slip/{loan_request_id}")
async def generate_slip(
    loan_request_id: str,
    current_user: Dict = Depends(get_current_user)
) -> Dict[str, Any]:
    try:
        return await slip_service.get_slip(loan_request_id, current_user)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error generating slip for loan request %s", loan_request_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while generating the slip"
        )
