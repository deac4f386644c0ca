import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from beanie import PydanticObjectId
from beanie.operators import In
from bson.errors import InvalidId
from fastapi import HTTPException, UploadFile, status

from qarz_portal.database.models import LoanRequest, Guarantor, User
from qarz_portal.helpers.response_builder import build_loan_request_response
from qarz_portal.loan_categories import catalog_as_dict, validate_loan_terms
from qarz_portal.schemas.loan_schema import (
    DocumentUpdate,
    GuarantorCreate,
    LoanCalculationRequest,
    LoanRequestCreate,
    LoanStatusEnum,
)
from qarz_portal.services.document_service import DocumentService, document_service
from qarz_portal.services.loan_calculator import calculate_loan

logger = logging.getLogger(__name__)

REQUIRED_GUARANTORS = 2


def parse_object_id(value: str, label: str = "Loan request") -> PydanticObjectId:
    if not value:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")


def is_owner(loan_request, current_user: Dict[str, Any]) -> bool:
    return str(loan_request.user_id) == str(current_user.get("id"))


class LoanRequestService:
    """Applicant-side operations on loan requests."""

    def __init__(self, document_service: DocumentService):
        self.document_service = document_service

    def get_categories(self) -> Dict[str, Dict[str, Any]]:
        return catalog_as_dict()

    # Validates the estimate against the catalog and runs the installment calculation
    def calculate(self, payload: LoanCalculationRequest) -> Dict[str, Any]:
        try:
            validate_loan_terms(payload.category, payload.loan_amount, payload.period_months)
            return calculate_loan(payload.loan_amount, payload.initial_deposit, payload.period_months)
        except ValueError as e:
            logger.info("Loan calculation rejected: %s", e)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    # Creates a new loan request in pending status for the applicant
    async def create_loan_request(self, payload: LoanRequestCreate, current_user: Dict[str, Any]) -> Dict[str, Any]:
        try:
            validate_loan_terms(payload.category, payload.loan_amount, payload.loan_period, payload.subcategory)
            calculation = calculate_loan(payload.loan_amount, payload.initial_deposit, payload.loan_period)
        except ValueError as e:
            logger.info("Loan request rejected for user %s: %s", current_user.get("id"), e)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        loan_request = LoanRequest(
            user_id=PydanticObjectId(current_user["id"]),
            category=payload.category,
            subcategory=payload.subcategory,
            loan_amount=payload.loan_amount,
            loan_period=payload.loan_period,
            initial_deposit=payload.initial_deposit,
            monthly_installment=calculation["monthlyInstallment"],
            status=LoanStatusEnum.pending,
            additional_info=payload.additional_info,
        )
        await loan_request.insert()
        logger.info("Loan request %s created for user %s", loan_request.id, current_user["id"])
        return build_loan_request_response(loan_request, guarantors=[])

    async def _get_loan_request(self, loan_request_id: str) -> LoanRequest:
        loan_request = await LoanRequest.get(parse_object_id(loan_request_id))
        if not loan_request:
            logger.warning("Loan request %s not found", loan_request_id)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Loan request not found")
        return loan_request

    async def _get_owned_loan_request(self, loan_request_id: str, current_user: Dict[str, Any]) -> LoanRequest:
        loan_request = await self._get_loan_request(loan_request_id)
        if not is_owner(loan_request, current_user):
            logger.warning("User %s does not own loan request %s", current_user.get("id"), loan_request_id)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
        return loan_request

    async def _load_guarantors(self, guarantor_ids: List[PydanticObjectId]) -> List[Guarantor]:
        if not guarantor_ids:
            return []
        found = await Guarantor.find(In(Guarantor.id, list(guarantor_ids))).to_list()
        by_id = {g.id: g for g in found}
        # Keep the submission order stored on the request
        return [by_id[gid] for gid in guarantor_ids if gid in by_id]

    async def _load_applicant(self, user_id: PydanticObjectId) -> Optional[User]:
        return await User.get(user_id)

    # Attaches exactly two guarantors; a repeat call creates new records and replaces the references
    async def add_guarantors(
        self,
        loan_request_id: str,
        guarantors: List[GuarantorCreate],
        current_user: Dict[str, Any]
    ) -> Dict[str, Any]:
        if not guarantors or len(guarantors) != REQUIRED_GUARANTORS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Exactly two guarantors are required"
            )

        loan_request = await self._get_owned_loan_request(loan_request_id, current_user)

        created: List[Guarantor] = []
        for guarantor_data in guarantors:
            guarantor = Guarantor(
                loan_request_id=loan_request.id,
                name=guarantor_data.name,
                email=guarantor_data.email.lower(),
                cnic=guarantor_data.cnic,
                location=guarantor_data.location,
                phone_number=guarantor_data.phone_number,
            )
            await guarantor.insert()
            created.append(guarantor)

        loan_request.guarantors = [g.id for g in created]
        loan_request.updated_at = datetime.utcnow()
        await loan_request.save()
        logger.info("Attached %d guarantors to loan request %s", len(created), loan_request.id)
        return build_loan_request_response(loan_request, guarantors=created)

    # Stores uploaded files and their references; slots without a new file stay unchanged
    async def attach_documents(
        self,
        loan_request_id: str,
        files: Dict[str, Optional[UploadFile]],
        current_user: Dict[str, Any]
    ) -> Dict[str, Any]:
        if not any(files.values()):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")

        loan_request = await self._get_owned_loan_request(loan_request_id, current_user)
        update: DocumentUpdate = await self.document_service.store_files(files)
        provided = update.provided()

        for field, path in provided.items():
            setattr(loan_request.documents, field, path)
        loan_request.updated_at = datetime.utcnow()
        try:
            await loan_request.save()
        except Exception:
            logger.error("Saving documents on loan request %s failed; removing new files", loan_request.id)
            self.document_service.discard(provided.values())
            raise
        logger.info("Updated documents %s on loan request %s", sorted(provided), loan_request.id)
        return build_loan_request_response(loan_request)

    # Lists the caller's own requests, newest first, one entry per request
    async def get_user_loan_requests(self, current_user: Dict[str, Any]) -> List[Dict[str, Any]]:
        user_id = PydanticObjectId(current_user["id"])
        loan_requests = await LoanRequest.find(LoanRequest.user_id == user_id).sort("-created_at").to_list()

        unique: Dict[str, LoanRequest] = {}
        for loan_request in loan_requests:
            unique.setdefault(str(loan_request.id), loan_request)

        results = []
        for loan_request in unique.values():
            guarantors = await self._load_guarantors(loan_request.guarantors)
            results.append(build_loan_request_response(loan_request, guarantors=guarantors))
        return results

    # Fetches one request; only its owner or an administrator may read it
    async def get_loan_request(self, loan_request_id: str, current_user: Dict[str, Any]) -> Dict[str, Any]:
        loan_request = await self._get_loan_request(loan_request_id)

        if not is_owner(loan_request, current_user) and not current_user.get("isAdmin"):
            logger.warning("User %s denied access to loan request %s", current_user.get("id"), loan_request_id)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")

        applicant = await self._load_applicant(loan_request.user_id)
        guarantors = await self._load_guarantors(loan_request.guarantors)
        return build_loan_request_response(loan_request, guarantors=guarantors, applicant=applicant)


loan_request_service = LoanRequestService(document_service=document_service)
