"""
Exceptions raised by the import workflow.

Parsing and category suggestion never raise for bad data; these are only
used where a caller asks for something that cannot be done yet.
"""
from typing import List


class LuthierFinanceError(Exception):
    """Base exception for luthier_finance"""


class UncategorizedRowsError(LuthierFinanceError):
    """Raised when committing a session that still has rows without a category.

    Attributes:
        pending: Row indexes (0-based) that still need a category
    """

    def __init__(self, pending: List[int]):
        self.pending = list(pending)
        super().__init__(
            f"{len(self.pending)} row(s) still need a category: "
            f"{', '.join(str(i + 1) for i in self.pending[:10])}"
            f"{'...' if len(self.pending) > 10 else ''}"
        )
