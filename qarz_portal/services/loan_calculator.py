"""
Interest-free (Qarze Hasana) installment calculation.

There is no interest: the applicant repays the financed remainder in equal
monthly installments. Installments are rounded up to whole currency units,
so the total payable can exceed the loan amount by at most
``period_months - 1`` units.
"""

import math
from typing import Dict, Union

Number = Union[int, float]


def calculate_loan(loan_amount: Number, initial_deposit: Number, period_months: int) -> Dict[str, Number]:
    if period_months is None or period_months <= 0 or int(period_months) != period_months:
        raise ValueError("Loan period must be a positive whole number of months")
    if loan_amount < 0:
        raise ValueError("Loan amount cannot be negative")
    if initial_deposit < 0:
        raise ValueError("Initial deposit cannot be negative")
    if initial_deposit > loan_amount:
        raise ValueError("Initial deposit cannot exceed the loan amount")

    period_months = int(period_months)
    remaining_amount = loan_amount - initial_deposit
    monthly_installment = math.ceil(remaining_amount / period_months)

    return {
        "totalLoan": loan_amount,
        "initialDeposit": initial_deposit,
        "remainingAmount": remaining_amount,
        "periodMonths": period_months,
        "monthlyInstallment": monthly_installment,
        "totalPayable": initial_deposit + monthly_installment * period_months,
    }
