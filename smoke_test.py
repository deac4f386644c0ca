#!/usr/bin/env python3
"""
Smoke test for a running Qarze Hasana API
Walks an applicant through registration, a loan request and its guarantors
"""

import asyncio
import httpx
from typing import Dict, Optional

# Test configuration
BASE_URL = "http://127.0.0.1:8000"  # Change this to your server URL
TEST_USER = {
    "cnic": "42101-9999999-1",
    "email": "smoke@example.com",
    "name": "Smoke Test",
    "password": "testpassword123",
    "phoneNumber": "0300-0000000",
    "address": {"street": "1 Main Rd", "city": "Karachi", "country": "Pakistan", "zipCode": "74000"},
}
TEST_LOAN = {
    "category": "Wedding Loans",
    "subcategory": "Jahez",
    "loanAmount": 100000,
    "initialDeposit": 10000,
    "loanPeriod": 12,
}
TEST_GUARANTORS = [
    {"name": "First Guarantor", "email": "g1@example.com", "cnic": "42101-0000001-1", "location": "Karachi"},
    {"name": "Second Guarantor", "email": "g2@example.com", "cnic": "42101-0000002-1", "location": "Karachi"},
]


class ApiSmokeTester:
    def __init__(self, base_url: str):
        self.base_url = base_url
        self.access_token: Optional[str] = None
        self.loan_request_id: Optional[str] = None

    def _headers(self) -> Dict[str, str]:
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}

    async def _call(self, title: str, method: str, path: str, expected: int, **kwargs) -> Dict:
        print(f"\n{title}...")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.request(method, f"{self.base_url}{path}", headers=self._headers(), **kwargs)
                print(f"Status Code: {response.status_code}")
                print(f"Response: {response.json()}")

                if response.status_code == expected:
                    print("✅ Passed")
                else:
                    print(f"❌ Expected {expected}")
                return response.json()

            except Exception as e:
                print(f"❌ Error: {e}")
                return {"error": str(e)}

    async def check_registration(self) -> Dict:
        return await self._call("🔐 Registering applicant", "POST", "/auth/register", 201, json=TEST_USER)

    async def check_login(self) -> Dict:
        # OAuth2 expects form data with a 'username' field
        result = await self._call(
            "🔑 Logging in", "POST", "/auth/login", 200,
            data={"username": TEST_USER["email"], "password": TEST_USER["password"]},
        )
        self.access_token = result.get("access_token")
        return result

    async def check_profile(self) -> Dict:
        return await self._call("👤 Reading profile", "GET", "/auth/profile", 200)

    async def check_calculation(self) -> Dict:
        payload = {
            "category": TEST_LOAN["category"],
            "loanAmount": TEST_LOAN["loanAmount"],
            "initialDeposit": TEST_LOAN["initialDeposit"],
            "periodMonths": TEST_LOAN["loanPeriod"],
        }
        return await self._call("🧮 Calculating installment", "POST", "/loan/calculate", 200, json=payload)

    async def check_loan_request(self) -> Dict:
        result = await self._call("📝 Submitting loan request", "POST", "/loan/request", 201, json=TEST_LOAN)
        self.loan_request_id = (result.get("loanRequest") or {}).get("_id")
        return result

    async def check_guarantors(self) -> Dict:
        if not self.loan_request_id:
            print("❌ No loan request available. Submit one first.")
            return {"error": "No loan request"}

        await self._call(
            "🚫 Attaching a single guarantor", "POST", f"/loan/request/{self.loan_request_id}/guarantors", 400,
            json={"guarantors": TEST_GUARANTORS[:1]},
        )
        return await self._call(
            "🤝 Attaching two guarantors", "POST", f"/loan/request/{self.loan_request_id}/guarantors", 200,
            json={"guarantors": TEST_GUARANTORS},
        )

    async def check_slip_before_token(self) -> Dict:
        return await self._call("🎫 Requesting slip before a token exists", "GET", f"/loan/slip/{self.loan_request_id}", 400)

    async def check_unauthorized_access(self) -> Dict:
        token, self.access_token = self.access_token, None
        try:
            return await self._call("🔒 Listing requests without a token", "GET", "/loan/requests", 401)
        finally:
            self.access_token = token

    async def run_all(self):
        print("🚀 Starting API smoke test...")
        print(f"Base URL: {self.base_url}")
        print("=" * 50)

        await self.check_registration()
        await self.check_login()
        await self.check_profile()
        await self.check_calculation()
        await self.check_loan_request()
        await self.check_guarantors()
        await self.check_slip_before_token()
        await self.check_unauthorized_access()

        print("\n" + "=" * 50)
        print("🎉 Smoke test completed!")


async def main():
    tester = ApiSmokeTester(BASE_URL)
    await tester.run_all()

if __name__ == "__main__":
    print("Qarze Hasana API smoke test")
    print("Make sure your FastAPI server is running on", BASE_URL)
    print("Press Ctrl+C to cancel, or Enter to continue...")
    input()
    asyncio.run(main())
