# qarz_portal/loan_categories.py

"""
Centralized catalog of the Qarze Hasana loan categories.

Each category lists the subcategories an applicant may pick, the maximum
amount that may be requested (None means no ceiling) and the longest
repayment period in years. The catalog is read-only reference data; it is
built once at import time and exposed through a read-only mapping.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Any, Optional, Tuple


@dataclass(frozen=True)
class LoanCategory:
    name: str
    subcategories: Tuple[str, ...]
    max_amount: Optional[float]
    period_years: int

    @property
    def max_period_months(self) -> int:
        return self.period_years * 12

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subcategories": list(self.subcategories),
            "maxAmount": self.max_amount,
            "periodYears": self.period_years,
        }


LOAN_CATEGORIES_CATALOG = MappingProxyType({
    category.name: category
    for category in (
        LoanCategory(
            name="Wedding Loans",
            subcategories=("Valima", "Furniture", "Valima Food", "Jahez"),
            max_amount=500000,
            period_years=3,
        ),
        LoanCategory(
            name="Home Construction Loans",
            subcategories=("Structure", "Finishing", "Loan"),
            max_amount=1000000,
            period_years=5,
        ),
        LoanCategory(
            name="Business Startup Loans",
            subcategories=("Buy Stall", "Advance Rent for Shop", "Shop Assets", "Shop Machinery"),
            max_amount=1000000,
            period_years=5,
        ),
        LoanCategory(
            name="Education Loans",
            subcategories=("University Fees", "Child Fees Loan"),
            max_amount=None,  # decided per applicant, no fixed ceiling
            period_years=4,
        ),
    )
})


def get_category(name: str) -> LoanCategory:
    category = LOAN_CATEGORIES_CATALOG.get(name)
    if category is None:
        raise ValueError("Invalid loan category")
    return category


def catalog_as_dict() -> Dict[str, Dict[str, Any]]:
    return {name: category.to_dict() for name, category in LOAN_CATEGORIES_CATALOG.items()}


def validate_loan_terms(
    category_name: str,
    loan_amount: float,
    period_months: int,
    subcategory: Optional[str] = None,
) -> LoanCategory:
    """Check a requested amount and term against the catalog limits.

    The subcategory is only checked when one is given, so the calculator can
    validate an estimate before the applicant has picked one.
    """
    category = get_category(category_name)

    if subcategory is not None and subcategory not in category.subcategories:
        raise ValueError(
            f"Invalid subcategory '{subcategory}' for {category.name}. "
            f"Valid subcategories are: {', '.join(category.subcategories)}"
        )

    if category.max_amount is not None and loan_amount > category.max_amount:
        raise ValueError(f"Loan amount exceeds maximum limit of PKR {category.max_amount:,.0f}")

    if period_months > category.max_period_months:
        raise ValueError(
            f"Loan period exceeds maximum of {category.max_period_months} months "
            f"({category.period_years} years) for {category.name}"
        )

    return category
