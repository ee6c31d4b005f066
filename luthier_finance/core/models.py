"""
Import data structures

Draft transactions produced by the CSV parser, skip results for rows that
could not be used, and the read-only financial categories they are matched
against.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional


RECEIPT = 'receipt'
EXPENSE = 'expense'
TRANSACTION_TYPES = (RECEIPT, EXPENSE)

# Values stored in the `tipo` column of the hosted database
DB_TYPE_NAMES = {
    RECEIPT: 'receita',
    EXPENSE: 'despesa',
}
TYPES_BY_DB_NAME = {name: txn_type for txn_type, name in DB_TYPE_NAMES.items()}

# Skip reasons
MISSING_COLUMN = 'missing_column'
INVALID_DATE = 'invalid_date'
INVALID_AMOUNT = 'invalid_amount'
EMPTY_DESCRIPTION = 'empty_description'


@dataclass(frozen=True)
class Category:
    """Financial category (read-only, owned by the database)"""
    id: str
    name: str
    type: str


@dataclass
class DraftTransaction:
    """Candidate transaction from one CSV row, never persisted as-is"""
    line_number: int
    date: date
    description: str
    amount: Decimal
    # Only used to inform the type classifier
    signed_amount: Decimal = field(repr=False)

    # Filled by classification
    type: Optional[str] = None
    suggested_category_id: Optional[str] = None

    @property
    def iso_date(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class SkippedRow:
    """A CSV row the parser could not turn into a draft"""
    line_number: int
    reason: str
    raw_value: Optional[str] = None
