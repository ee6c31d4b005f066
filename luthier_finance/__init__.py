"""
Luthier Finance

Statement import for a musical-instrument repair shop: reads bank CSV
exports, guesses transaction type and category, and records the reviewed
transactions in the shop's database.
"""

__version__ = "1.0.0"

# Expose main classes for easy imports
from .core.models import Category, DraftTransaction, SkippedRow, RECEIPT, EXPENSE
from .core.csv_parser import parse_csv, parse_csv_file
from .core.type_classifier import classify_transaction
from .core.rule_matcher import RuleMatcher
from .core.import_session import ImportSession

__all__ = [
    'Category',
    'DraftTransaction',
    'SkippedRow',
    'RECEIPT',
    'EXPENSE',
    'parse_csv',
    'parse_csv_file',
    'classify_transaction',
    'RuleMatcher',
    'ImportSession',
]
