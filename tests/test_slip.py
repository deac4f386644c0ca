import base64
from datetime import datetime

import pytest
from fastapi import HTTPException

from fakes import FakeApplicant, FakeLoanRequest, FakeLoanRequestModel, FakeUserModel
from qarz_portal.services import slip_service as slip_module
from qarz_portal.services.slip_service import (
    TOKEN_NOT_ASSIGNED,
    assemble_slip,
    generate_qr_data_url,
    slip_service,
)


class RecordingEncoder:
    def __init__(self):
        self.payloads = []

    def __call__(self, payload):
        self.payloads.append(payload)
        return "data:image/png;base64,AAAA"


def _scheduled_loan(user_id, **overrides):
    fields = dict(
        token_number="SWF12345678042",
        status="under-review",
        appointment_date=datetime(2025, 3, 10),
        appointment_time="10:30 AM",
        office_location="Bahadurabad",
    )
    fields.update(overrides)
    return FakeLoanRequest(user_id, **fields)


def test_slip_requires_token():
    encoder = RecordingEncoder()
    applicant = FakeApplicant()

    with pytest.raises(ValueError, match="Token number not assigned"):
        assemble_slip(FakeLoanRequest(applicant.id), applicant, qr_encoder=encoder)

    assert encoder.payloads == []


def test_slip_contents():
    encoder = RecordingEncoder()
    applicant = FakeApplicant()
    loan = _scheduled_loan(applicant.id)

    slip = assemble_slip(loan, applicant, qr_encoder=encoder)

    assert slip["tokenNumber"] == "SWF12345678042"
    assert slip["applicantName"] == "Ayesha Khan"
    assert slip["cnic"] == "42101-1234567-1"
    assert slip["monthlyInstallment"] == 7500
    assert slip["appointmentDate"] == "2025-03-10T00:00:00"
    assert slip["officeLocation"] == "Bahadurabad"
    assert slip["qrCode"] == "data:image/png;base64,AAAA"
    assert encoder.payloads == [{
        "tokenNumber": "SWF12345678042",
        "name": "Ayesha Khan",
        "cnic": "42101-1234567-1",
        "loanAmount": 100000,
        "category": "Wedding Loans",
    }]


def test_qr_data_url_is_png():
    data_url = generate_qr_data_url({"tokenNumber": "SWF12345678042"})

    prefix = "data:image/png;base64,"
    assert data_url.startswith(prefix)
    assert base64.b64decode(data_url[len(prefix):]).startswith(b"\x89PNG")


@pytest.fixture
def slip_stores(monkeypatch):
    applicant = FakeApplicant()
    scheduled = _scheduled_loan(applicant.id)
    unscheduled = FakeLoanRequest(applicant.id)
    monkeypatch.setattr(slip_module, "LoanRequest", FakeLoanRequestModel(scheduled, unscheduled))
    monkeypatch.setattr(slip_module, "User", FakeUserModel(applicant))
    return applicant, scheduled, unscheduled


@pytest.mark.asyncio
async def test_owner_gets_slip(slip_stores):
    applicant, scheduled, _ = slip_stores

    slip = await slip_service.get_slip(str(scheduled.id), {"id": str(applicant.id), "isAdmin": False})

    assert slip["tokenNumber"] == scheduled.token_number
    assert slip["qrCode"].startswith("data:image/png;base64,")


@pytest.mark.asyncio
async def test_slip_without_token_is_400(slip_stores):
    applicant, _, unscheduled = slip_stores

    with pytest.raises(HTTPException) as exc:
        await slip_service.get_slip(str(unscheduled.id), {"id": str(applicant.id), "isAdmin": False})

    assert exc.value.status_code == 400
    assert exc.value.detail == TOKEN_NOT_ASSIGNED


@pytest.mark.asyncio
async def test_slip_of_another_applicant_forbidden(slip_stores, other_user, admin_user):
    _, scheduled, _ = slip_stores

    with pytest.raises(HTTPException) as exc:
        await slip_service.get_slip(str(scheduled.id), other_user)
    assert exc.value.status_code == 403

    slip = await slip_service.get_slip(str(scheduled.id), admin_user)
    assert slip["tokenNumber"] == scheduled.token_number
