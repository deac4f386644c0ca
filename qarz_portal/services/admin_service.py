import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from beanie.operators import In
from fastapi import HTTPException, status
from pymongo.errors import DuplicateKeyError

from qarz_portal.core.config import settings
from qarz_portal.database.models import LoanRequest, Guarantor, User
from qarz_portal.helpers.response_builder import build_loan_request_response
from qarz_portal.schemas.loan_schema import LoanStatusEnum, TokenAssignmentRequest
from qarz_portal.services.audit_service import audit_service
from qarz_portal.services.loan_lifecycle import (
    apply_status,
    apply_token_assignment,
    generate_token_number,
    parse_status,
)
from qarz_portal.services.loan_service import parse_object_id

logger = logging.getLogger(__name__)

TOKEN_ASSIGN_ATTEMPTS = 3


def _matches(value: Optional[str], wanted: Optional[str]) -> bool:
    if not wanted:
        return True
    return (value or "").strip().lower() == wanted.strip().lower()


def filter_by_address(
    pairs: Iterable[Tuple[Any, Any]],
    city: Optional[str] = None,
    country: Optional[str] = None,
) -> List[Tuple[Any, Any]]:
    """Keep (loan_request, applicant) pairs whose applicant address matches, ignoring case.

    Applicant addresses live in another collection, so this runs after the fetch.
    """
    if not city and not country:
        return list(pairs)

    kept = []
    for loan_request, applicant in pairs:
        address = getattr(applicant, "address", None) if applicant is not None else None
        if _matches(getattr(address, "city", None), city) and _matches(getattr(address, "country", None), country):
            kept.append((loan_request, applicant))
    return kept


def summarize_status_groups(groups: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Turn ``$group``-by-status rows (``_id``, ``count``, ``amount``) into the stats payload."""
    counts = {s.value: 0 for s in LoanStatusEnum}
    total_applications = 0
    total_amount = 0
    for row in groups:
        key = row.get("_id") or LoanStatusEnum.pending.value
        count = row.get("count", 0)
        counts[key] = counts.get(key, 0) + count
        total_applications += count
        total_amount += row.get("amount", 0) or 0

    return {
        "totalApplications": total_applications,
        "pendingApplications": counts[LoanStatusEnum.pending.value],
        "underReviewApplications": counts[LoanStatusEnum.under_review.value],
        "approvedApplications": counts[LoanStatusEnum.approved.value],
        "rejectedApplications": counts[LoanStatusEnum.rejected.value],
        "completedApplications": counts[LoanStatusEnum.completed.value],
        "totalLoanAmount": total_amount,
    }


class AdminService:
    """Administrator queries and lifecycle actions over all loan requests."""

    async def _get_loan_request(self, loan_request_id: str) -> LoanRequest:
        loan_request = await LoanRequest.get(parse_object_id(loan_request_id))
        if not loan_request:
            logger.warning("Loan request %s not found", loan_request_id)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Loan request not found")
        return loan_request

    async def _populate(self, loan_requests: List[LoanRequest]) -> List[Tuple[LoanRequest, Optional[User], List[Guarantor]]]:
        user_ids = list({lr.user_id for lr in loan_requests})
        guarantor_ids = [gid for lr in loan_requests for gid in lr.guarantors]

        users = await User.find(In(User.id, user_ids)).to_list() if user_ids else []
        guarantors = await Guarantor.find(In(Guarantor.id, guarantor_ids)).to_list() if guarantor_ids else []
        users_by_id = {u.id: u for u in users}
        guarantors_by_id = {g.id: g for g in guarantors}

        return [
            (
                lr,
                users_by_id.get(lr.user_id),
                [guarantors_by_id[gid] for gid in lr.guarantors if gid in guarantors_by_id],
            )
            for lr in loan_requests
        ]

    # Lists all requests, newest first; status filters in Mongo, city/country after the fetch
    async def list_applications(
        self,
        city: Optional[str] = None,
        country: Optional[str] = None,
        status_filter: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if status_filter:
            try:
                query["status"] = parse_status(status_filter).value
            except ValueError as e:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        loan_requests = await LoanRequest.find(query).sort("-created_at").to_list()
        populated = await self._populate(loan_requests)
        guarantors_by_request = {id(lr): gs for lr, _, gs in populated}

        kept = filter_by_address(((lr, user) for lr, user, _ in populated), city=city, country=country)
        logger.info(
            "Admin listing: %d of %d requests (status=%s, city=%s, country=%s)",
            len(kept), len(loan_requests), status_filter, city, country
        )
        return [
            build_loan_request_response(lr, guarantors=guarantors_by_request[id(lr)], applicant=user)
            for lr, user in kept
        ]

    # Counts per status and the summed loan amount in one aggregation pass
    async def get_stats(self) -> Dict[str, Any]:
        pipeline = [
            {"$group": {
                "_id": "$status",
                "count": {"$sum": 1},
                "amount": {"$sum": "$loan_amount"},
            }}
        ]
        groups = await LoanRequest.aggregate(pipeline).to_list()
        return summarize_status_groups(groups)

    # Overwrites the status with any valid value; no ordering is enforced
    async def update_status(self, loan_request_id: str, new_status: Optional[str], admin_user: Dict[str, Any]) -> Dict[str, Any]:
        try:
            target = parse_status(new_status)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        loan_request = await self._get_loan_request(loan_request_id)
        previous = loan_request.status
        apply_status(loan_request, target)
        await loan_request.save()

        logger.info("Loan request %s status %s -> %s", loan_request_id, previous, target.value)
        await audit_service.record(
            action="update_status",
            actor=admin_user.get("email"),
            acted=str(loan_request.id),
            details=f"{getattr(previous, 'value', previous)} -> {target.value}",
        )
        return build_loan_request_response(loan_request)

    # Gives the request a token once and (re)schedules its appointment
    async def assign_token(
        self,
        loan_request_id: str,
        assignment: TokenAssignmentRequest,
        admin_user: Dict[str, Any]
    ) -> Dict[str, Any]:
        loan_request = await self._get_loan_request(loan_request_id)
        had_token = bool(loan_request.token_number)

        def token_factory() -> str:
            return generate_token_number(settings.TOKEN_PREFIX)

        try:
            apply_token_assignment(
                loan_request,
                assignment,
                token_factory,
                default_office_location=settings.DEFAULT_OFFICE_LOCATION or None,
            )
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        for attempt in range(1, TOKEN_ASSIGN_ATTEMPTS + 1):
            try:
                await loan_request.save()
                break
            except DuplicateKeyError:
                if had_token or attempt == TOKEN_ASSIGN_ATTEMPTS:
                    logger.error("Token %s collided on loan request %s; giving up", loan_request.token_number, loan_request_id)
                    await audit_service.record(
                        action="assign_token",
                        actor=admin_user.get("email"),
                        acted=loan_request_id,
                        status="failed",
                        details="duplicate token number",
                    )
                    raise HTTPException(
                        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        detail="Could not assign a unique token number"
                    )
                logger.warning("Token %s already taken (attempt %d); regenerating", loan_request.token_number, attempt)
                loan_request.token_number = token_factory()

        logger.info("Loan request %s has token %s", loan_request_id, loan_request.token_number)
        await audit_service.record(
            action="assign_token",
            actor=admin_user.get("email"),
            acted=str(loan_request.id),
            details=loan_request.token_number,
        )
        return build_loan_request_response(loan_request)

    async def get_by_token(self, token_number: str) -> Dict[str, Any]:
        loan_request = await LoanRequest.find_one(LoanRequest.token_number == token_number)
        if not loan_request:
            logger.warning("No application with token %s", token_number)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")

        [(lr, applicant, guarantors)] = await self._populate([loan_request])
        return build_loan_request_response(lr, guarantors=guarantors, applicant=applicant)


admin_service = AdminService()
