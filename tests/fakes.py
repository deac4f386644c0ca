"""In-memory stand-ins for the Beanie documents used by the services."""

from datetime import datetime

from beanie import PydanticObjectId

from qarz_portal.database.models import Address, LoanDocuments


class FakeLoanRequest:
    """In-memory stand-in for a LoanRequest document."""

    def __init__(self, user_id, **overrides):
        self.id = PydanticObjectId()
        self.user_id = user_id
        self.category = "Wedding Loans"
        self.subcategory = "Jahez"
        self.loan_amount = 100000
        self.loan_period = 12
        self.initial_deposit = 10000
        self.monthly_installment = 7500
        self.status = "pending"
        self.token_number = None
        self.appointment_date = None
        self.appointment_time = None
        self.office_location = None
        self.guarantors = []
        self.documents = LoanDocuments()
        self.additional_info = None
        self.created_at = datetime(2025, 1, 1, 9, 0, 0)
        self.updated_at = self.created_at
        self.save_errors = []
        self.saves = 0
        for key, value in overrides.items():
            setattr(self, key, value)

    async def save(self):
        if self.save_errors:
            raise self.save_errors.pop(0)
        self.saves += 1
        return self


class _Field:
    """Class attribute whose comparisons build a (name, value) filter, like Beanie's fields."""

    def __init__(self, name):
        self.name = name

    def __eq__(self, value):
        return (self.name, value)

    __hash__ = object.__hash__


class FakeLoanRequestModel:
    """Replaces the LoanRequest class inside a service module."""

    user_id = _Field("user_id")
    token_number = _Field("token_number")

    def __init__(self, *loan_requests):
        self.store = {lr.id: lr for lr in loan_requests}
        self.find_calls = []
        self.find_result = None
        self.aggregate_result = []
        self.aggregate_calls = []

    async def get(self, object_id):
        return self.store.get(object_id)

    def find(self, *args, **kwargs):
        self.find_calls.append(args)
        if self.find_result is not None:
            return _FakeCursor(self.find_result)
        return _FakeCursor(list(self.store.values()))

    async def find_one(self, condition):
        name, value = condition
        for loan_request in self.store.values():
            if getattr(loan_request, name) == value:
                return loan_request
        return None

    def aggregate(self, pipeline):
        self.aggregate_calls.append(pipeline)
        return _FakeCursor(self.aggregate_result)


class _FakeCursor:
    def __init__(self, items):
        self._items = items

    def sort(self, *args, **kwargs):
        return self

    async def to_list(self):
        return list(self._items)


class FakeGuarantorModel:
    """Callable replacement for the Guarantor class; records every insert."""

    def __init__(self):
        self.inserted = []

    def __call__(self, **fields):
        model = self

        class _Guarantor:
            def __init__(self):
                self.id = None
                self.phone_number = None
                for key, value in fields.items():
                    setattr(self, key, value)

            async def insert(self):
                self.id = PydanticObjectId()
                model.inserted.append(self)
                return self

        return _Guarantor()


class FakeApplicant:
    def __init__(self, name="Ayesha Khan", cnic="42101-1234567-1", city="Karachi", country="Pakistan"):
        self.id = PydanticObjectId()
        self.name = name
        self.email = f"{name.split()[0].lower()}@example.com"
        self.cnic = cnic
        self.phone_number = "0300-1234567"
        self.address = Address(street="1 Main Rd", city=city, country=country, zip_code="74000")




class FakeUserModel:
    def __init__(self, *users):
        self.store = {u.id: u for u in users}

    async def get(self, object_id):
        return self.store.get(object_id)
