"""
Appointment slip assembly.

A slip can only be produced once an administrator has assigned a token. It
combines the token, the applicant summary, the loan and the appointment,
plus a QR code of the fields a desk officer needs to verify the applicant.
"""

import base64
import io
import json
import logging
from typing import Any, Callable, Dict

import qrcode
from fastapi import HTTPException, status

from qarz_portal.database.models import LoanRequest, User
from qarz_portal.helpers.response_builder import convert_objectid
from qarz_portal.services.loan_service import is_owner, parse_object_id

logger = logging.getLogger(__name__)

TOKEN_NOT_ASSIGNED = "Token number not assigned yet. Please wait for admin approval."


def generate_qr_data_url(payload: Dict[str, Any]) -> str:
    image = qrcode.make(json.dumps(payload, separators=(",", ":")))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def build_qr_payload(loan_request, applicant) -> Dict[str, Any]:
    return {
        "tokenNumber": loan_request.token_number,
        "name": applicant.name,
        "cnic": applicant.cnic,
        "loanAmount": loan_request.loan_amount,
        "category": convert_objectid(loan_request.category),
    }


def assemble_slip(
    loan_request,
    applicant,
    qr_encoder: Callable[[Dict[str, Any]], str] = generate_qr_data_url,
) -> Dict[str, Any]:
    if not loan_request.token_number:
        raise ValueError(TOKEN_NOT_ASSIGNED)

    slip = {
        "tokenNumber": loan_request.token_number,
        "applicantName": applicant.name,
        "cnic": applicant.cnic,
        "loanAmount": loan_request.loan_amount,
        "category": loan_request.category,
        "subcategory": loan_request.subcategory,
        "monthlyInstallment": loan_request.monthly_installment,
        "appointmentDate": loan_request.appointment_date,
        "appointmentTime": loan_request.appointment_time,
        "officeLocation": loan_request.office_location,
        "status": loan_request.status,
        "qrCode": qr_encoder(build_qr_payload(loan_request, applicant)),
    }
    return convert_objectid(slip)


class SlipService:

    async def get_slip(self, loan_request_id: str, current_user: Dict[str, Any]) -> Dict[str, Any]:
        loan_request = await LoanRequest.get(parse_object_id(loan_request_id))
        if not loan_request:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Loan request not found")

        if not is_owner(loan_request, current_user) and not current_user.get("isAdmin"):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")

        applicant = await User.get(loan_request.user_id)
        if not applicant:
            logger.error("Applicant %s of loan request %s is missing", loan_request.user_id, loan_request_id)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Applicant not found")

        try:
            slip = assemble_slip(loan_request, applicant)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        logger.info("Slip generated for loan request %s (token %s)", loan_request_id, loan_request.token_number)
        return slip


slip_service = SlipService()
