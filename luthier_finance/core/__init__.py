"""
Luthier Finance - statement import

Parses bank statement CSVs, classifies each line as receipt or expense and
suggests a financial category before the shop owner reviews and commits it.
"""

__version__ = "1.0.0"

# Expose main classes for easy imports
from .csv_parser import parse_csv, parse_csv_file
from .type_classifier import classify_transaction
from .rule_matcher import RuleMatcher, CategoryRule, DEFAULT_RULES
from .import_session import ImportSession

__all__ = [
    'parse_csv',
    'parse_csv_file',
    'classify_transaction',
    'RuleMatcher',
    'CategoryRule',
    'DEFAULT_RULES',
    'ImportSession',
]
