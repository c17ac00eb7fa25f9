"""Shared fixtures for LMA Bridge tests."""

import pytest


CANONICAL_AGREEMENT = """CREDIT AGREEMENT

This CREDIT AGREEMENT dated as of March 15, 2024 is entered into between TECHCORP INDUSTRIES INC., a Delaware corporation (the "Borrower"), the several banks and other financial institutions from time to time parties hereto (the "Lenders"), and FIRST NATIONAL BANK, as Administrative Agent.

ARTICLE I - THE FACILITY
The Lenders agree to make available to the Borrower a senior secured term loan facility in an aggregate principal amount of FIVE HUNDRED MILLION DOLLARS ($500,000,000). All amounts under this Agreement shall be denominated in United States Dollars (USD).

ARTICLE II - INTEREST
Each Loan shall bear interest at a rate per annum equal to Term SOFR plus 2.75% per annum.

ARTICLE III - FINANCIAL COVENANTS
The Borrower shall maintain a Total Leverage Ratio not to exceed 4.25:1.00 as of the last day of each fiscal quarter.

ARTICLE IV - SUSTAINABILITY
Sustainability Target: the Borrower shall reduce Scope 1 and Scope 2 greenhouse gas emissions by 40% by 2030.
"""

NO_ESG_AGREEMENT = """CREDIT AGREEMENT

This CREDIT AGREEMENT is entered into between TECHCORP INDUSTRIES INC., a Delaware corporation (the "Borrower"), and the Lenders party hereto.

ARTICLE I - THE FACILITY
The Lenders agree to make available to the Borrower a term loan facility in an aggregate principal amount of FIVE HUNDRED MILLION DOLLARS ($500,000,000). All amounts shall be denominated in United States Dollars (USD).

ARTICLE II - INTEREST
Each Loan shall bear interest at a rate per annum equal to Term SOFR plus 2.75% per annum.

ARTICLE III - FINANCIAL COVENANTS
The Borrower shall maintain a Total Leverage Ratio not to exceed 4.25:1.00.
"""

SYMBOL_ONLY_AGREEMENT = (
    'ACME HOLDINGS LLC (the "Borrower") enters into a $50,000,000 revolving credit '
    "facility with the Lenders party hereto."
)


@pytest.fixture
def canonical_agreement() -> str:
    """Agreement containing every field in its most common wording."""
    return CANONICAL_AGREEMENT


@pytest.fixture
def no_esg_agreement() -> str:
    """Well-formed agreement without any sustainability language."""
    return NO_ESG_AGREEMENT


@pytest.fixture
def symbol_only_agreement() -> str:
    """Agreement that states the amount only with a dollar sign."""
    return SYMBOL_ONLY_AGREEMENT
