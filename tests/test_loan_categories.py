import pytest

from qarz_portal.loan_categories import (
    LOAN_CATEGORIES_CATALOG,
    catalog_as_dict,
    get_category,
    validate_loan_terms,
)


def test_catalog_lists_four_categories():
    catalog = catalog_as_dict()

    assert set(catalog) == {
        "Wedding Loans",
        "Home Construction Loans",
        "Business Startup Loans",
        "Education Loans",
    }
    assert catalog["Wedding Loans"] == {
        "subcategories": ["Valima", "Furniture", "Valima Food", "Jahez"],
        "maxAmount": 500000,
        "periodYears": 3,
    }
    assert catalog["Education Loans"]["maxAmount"] is None


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        LOAN_CATEGORIES_CATALOG["Car Loans"] = None


def test_unknown_category():
    with pytest.raises(ValueError, match="Invalid loan category"):
        get_category("Car Loans")


def test_amount_over_ceiling_rejected():
    with pytest.raises(ValueError, match="500,000"):
        validate_loan_terms("Wedding Loans", 600000, 12)


def test_amount_at_ceiling_accepted():
    category = validate_loan_terms("Wedding Loans", 500000, 36, "Jahez")
    assert category.max_period_months == 36


def test_period_over_limit_rejected():
    with pytest.raises(ValueError, match="36 months"):
        validate_loan_terms("Wedding Loans", 100000, 37)


def test_subcategory_must_belong_to_category():
    with pytest.raises(ValueError, match="Invalid subcategory"):
        validate_loan_terms("Wedding Loans", 100000, 12, "University Fees")


def test_education_has_no_amount_ceiling():
    validate_loan_terms("Education Loans", 5000000, 48, "University Fees")

    with pytest.raises(ValueError):
        validate_loan_terms("Education Loans", 5000000, 49)
