from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from bson import ObjectId


def convert_objectid(obj):
    """Convert ObjectId, datetime and Enum values so the result is JSON-ready."""
    if isinstance(obj, dict):
        return {key: convert_objectid(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_objectid(item) for item in obj]
    elif isinstance(obj, ObjectId):
        return str(obj)
    elif isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, Enum):
        return obj.value
    return obj


def _address_dict(address) -> Dict[str, Optional[str]]:
    if address is None:
        return {"street": None, "city": None, "country": None, "zipCode": None}
    return {
        "street": getattr(address, "street", None),
        "city": getattr(address, "city", None),
        "country": getattr(address, "country", None),
        "zipCode": getattr(address, "zip_code", None),
    }


def build_user_summary(user) -> Dict[str, Any]:
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "cnic": user.cnic,
        "phoneNumber": user.phone_number,
        "address": _address_dict(user.address),
        "isAdmin": user.is_admin,
        "isFirstLogin": user.is_first_login,
    }


def build_applicant(user) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "_id": str(user.id),
        "name": user.name,
        "email": user.email,
        "cnic": user.cnic,
        "phoneNumber": user.phone_number,
        "address": _address_dict(user.address),
    }


def build_guarantor(guarantor) -> Dict[str, Any]:
    return {
        "_id": str(guarantor.id),
        "loanRequestId": str(guarantor.loan_request_id),
        "name": guarantor.name,
        "email": guarantor.email,
        "cnic": guarantor.cnic,
        "location": guarantor.location,
        "phoneNumber": guarantor.phone_number,
    }


def build_loan_request_response(
    loan_request,
    guarantors: Optional[Iterable[Any]] = None,
    applicant=None,
) -> Dict[str, Any]:
    """Render a loan request as the camelCase payload the web client expects.

    Guarantor references are replaced by full records when ``guarantors`` is
    given; the applicant summary is attached when ``applicant`` is given.
    """
    documents = loan_request.documents
    response = {
        "_id": str(loan_request.id),
        "userId": str(loan_request.user_id),
        "category": loan_request.category,
        "subcategory": loan_request.subcategory,
        "loanAmount": loan_request.loan_amount,
        "loanPeriod": loan_request.loan_period,
        "initialDeposit": loan_request.initial_deposit,
        "monthlyInstallment": loan_request.monthly_installment,
        "status": loan_request.status,
        "tokenNumber": loan_request.token_number,
        "appointmentDate": loan_request.appointment_date,
        "appointmentTime": loan_request.appointment_time,
        "officeLocation": loan_request.office_location,
        "documents": {
            "profilePhoto": documents.profile_photo,
            "cnicFront": documents.cnic_front,
            "cnicBack": documents.cnic_back,
            "salarySheet": documents.salary_sheet,
            "statement": documents.statement,
        },
        "additionalInfo": loan_request.additional_info,
        "createdAt": loan_request.created_at,
        "updatedAt": loan_request.updated_at,
    }

    if guarantors is not None:
        response["guarantors"] = [build_guarantor(g) for g in guarantors]
    else:
        response["guarantors"] = [str(g) for g in loan_request.guarantors]

    if applicant is not None:
        response["applicant"] = build_applicant(applicant)

    return convert_objectid(response)
