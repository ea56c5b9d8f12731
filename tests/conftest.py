"""Shared fixtures for finance ledger tests."""

from decimal import Decimal

import pytest

from finance_ledger.models.transaction import Transaction

CHECKING_HEADER = "Details,Posting Date,Description,Amount,Type,Balance,Check or Slip #"
CREDIT_HEADER = "Transaction Date,Post Date,Description,Category,Type,Amount,Memo"


@pytest.fixture
def checking_csv() -> str:
    """A two-row checking export."""
    return "\n".join([
        CHECKING_HEADER,
        '"",01/05/2024,"COSTCO WHOLESALE",-54.32,DEBIT_CARD,1000.00,',
        '"",01/06/2024,"PAYROLL DEPOSIT",2500.00,ACH_CREDIT,3500.00,',
    ])


@pytest.fixture
def credit_csv() -> str:
    """A three-row credit card export."""
    return "\n".join([
        CREDIT_HEADER,
        "02/10/2024,02/11/2024,STARBUCKS #123,Food & Drink,Sale,-6.50,",
        "02/12/2024,02/13/2024,NETFLIX.COM,Entertainment,Sale,-15.99,",
        "02/14/2024,02/15/2024,AUTOMATIC PAYMENT - THANK,,Payment,500.00,",
    ])


def make_transaction(
    description: str,
    amount: str,
    date: str = "2024-01-01",
    category: str = "other",
) -> Transaction:
    """Build a transaction without running the categorizer."""
    return Transaction(date=date, description=description, amount=Decimal(amount), category=category)


@pytest.fixture
def txn():
    """Factory fixture for transactions that skip the categorizer."""
    return make_transaction
