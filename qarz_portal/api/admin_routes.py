from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Any, Dict, List, Optional
import logging

from qarz_portal.core.auth_dependencies import get_admin_user
from qarz_portal.schemas.loan_schema import TokenAssignmentRequest
from qarz_portal.services.admin_service import admin_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Administration"],
    dependencies=[Depends(get_admin_user)],
)


# Lists all applications with optional status, city and country filters
@router.get("/applications")
async def get_all_applications(
    city: Optional[str] = Query(default=None, description="Applicant city, case-insensitive"),
    country: Optional[str] = Query(default=None, description="Applicant country, case-insensitive"),
    status_filter: Optional[str] = Query(default=None, alias="status", description="Loan request status"),
) -> List[Dict[str, Any]]:
    try:
        return await admin_service.list_applications(city=city, country=country, status_filter=status_filter)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error listing applications")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while retrieving applications"
        )


# Returns counts per status and the total requested amount
@router.get("/stats")
async def get_application_stats() -> Dict[str, Any]:
    try:
        return await admin_service.get_stats()
    except Exception:
        logger.exception("Error computing application stats")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while computing statistics"
        )


# Sets the status of an application
@router.put("/application/{loan_request_id}/status")
async def update_application_status(
    loan_request_id: str,
    status_update: Dict[str, Any],
    admin_user: Dict = Depends(get_admin_user)
) -> Dict[str, Any]:
    try:
        loan_request = await admin_service.update_status(loan_request_id, status_update.get("status"), admin_user)
        return {"message": "Application status updated successfully", "loanRequest": loan_request}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error updating status of %s", loan_request_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while updating the application status"
        )


# Assigns a token number and schedules the review appointment
@router.post("/application/{loan_request_id}/assign")
async def assign_token_and_appointment(
    loan_request_id: str,
    assignment: TokenAssignmentRequest,
    admin_user: Dict = Depends(get_admin_user)
) -> Dict[str, Any]:
    try:
        loan_request = await admin_service.assign_token(loan_request_id, assignment, admin_user)
        return {"message": "Token and appointment assigned successfully", "loanRequest": loan_request}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error assigning token to %s", loan_request_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while assigning the token"
        )


# Looks an application up by its token number
@router.get("/application/token/{token_number}")
async def get_application_by_token(token_number: str) -> Dict[str, Any]:
    try:
        return await admin_service.get_by_token(token_number)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error looking up token %s", token_number)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error retrieving application"
        )
