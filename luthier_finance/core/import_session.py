"""
Import Session

Owns one CSV import from upload to commit:
1. Parse the statement into draft transactions
2. Classify each draft (receipt / expense)
3. Suggest a category for each draft
4. Hold the reviewer's type and category overrides
5. Build the records to persist once every row has a category

A session is created per upload and thrown away after commit or cancel.
"""
from datetime import datetime, time, timezone
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from luthier_finance.logging_setup import get_logger
from .csv_parser import iter_rows, log_skipped, read_csv_text
from .exceptions import UncategorizedRowsError
from .models import (
    Category,
    DraftTransaction,
    SkippedRow,
    RECEIPT,
    TRANSACTION_TYPES,
    DB_TYPE_NAMES,
    TYPES_BY_DB_NAME,
)
from .rule_matcher import RuleMatcher
from .type_classifier import classify_transaction

logger = get_logger(__name__)


class ImportSession:
    """
    Draft transactions of one import plus the reviewer's overrides
    """

    def __init__(self,
                 categories: Iterable[Category],
                 matcher: Optional[RuleMatcher] = None,
                 user_id: Optional[str] = None):
        """
        Args:
            categories: Categories available to this user
            matcher: Category rule matcher (default: built-in rules)
            user_id: Owner of the transactions created on commit
        """
        self.categories = list(categories)
        self.matcher = matcher or RuleMatcher(self.categories)
        self.user_id = user_id

        self._drafts: List[DraftTransaction] = []
        self.skipped: List[SkippedRow] = []
        self._type_overrides: Dict[int, str] = {}
        self._category_overrides: Dict[int, Optional[str]] = {}

        self.stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'total': 0,
            'skipped': 0,
            'receipts': 0,
            'expenses': 0,
            'suggested': 0,
            'needs_review': 0,
        }

    def load(self, csv_text: str) -> List[DraftTransaction]:
        """
        Parse, classify and categorize a CSV statement

        Any previous drafts and overrides are discarded.

        Returns:
            The drafts, in file order
        """
        self._drafts = []
        self.skipped = []
        self._type_overrides = {}
        self._category_overrides = {}
        self.stats = self._empty_stats()

        for row in iter_rows(csv_text):
            if isinstance(row, SkippedRow):
                log_skipped(row)
                self.skipped.append(row)
                self.stats['skipped'] += 1
                continue

            self._drafts.append(self.categorize_draft(row))

        logger.info("Parsed %d transaction(s), skipped %d row(s)",
                    len(self._drafts), len(self.skipped))
        return list(self._drafts)

    def load_file(self, csv_path: Union[str, Path], encoding: str = 'utf-8') -> List[DraftTransaction]:
        """Load a statement file (see load)"""
        return self.load(read_csv_text(csv_path, encoding))

    def categorize_draft(self, draft: DraftTransaction) -> DraftTransaction:
        """Set type and suggested category on a single draft"""
        self.stats['total'] += 1

        draft.type = classify_transaction(draft.description, draft.signed_amount)
        self.stats['receipts' if draft.type == RECEIPT else 'expenses'] += 1

        draft.suggested_category_id = self.matcher.suggest_category(
            draft.description, draft.amount, draft.type
        )
        if draft.suggested_category_id:
            self.stats['suggested'] += 1
        else:
            self.stats['needs_review'] += 1

        return draft

    @property
    def drafts(self) -> List[DraftTransaction]:
        return list(self._drafts)

    def __len__(self) -> int:
        return len(self._drafts)

    def __iter__(self) -> Iterator[DraftTransaction]:
        return iter(self._drafts)

    def _draft(self, index: int) -> DraftTransaction:
        if index < 0 or index >= len(self._drafts):
            raise IndexError(f"No draft at index {index}")
        return self._drafts[index]

    def effective_type(self, index: int) -> str:
        """Type after reviewer overrides"""
        draft = self._draft(index)
        return self._type_overrides.get(index, draft.type)

    def effective_category_id(self, index: int) -> Optional[str]:
        """Category after reviewer overrides"""
        draft = self._draft(index)
        if index in self._category_overrides:
            return self._category_overrides[index]
        return draft.suggested_category_id

    def categories_for(self, txn_type: str) -> List[Category]:
        """Categories selectable for a transaction type"""
        return [c for c in self.categories if c.type == txn_type]

    def override_type(self, index: int, txn_type: str):
        """
        Change a row's type

        The row's category is cleared, since categories belong to one type.
        """
        self._draft(index)
        if txn_type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type: {txn_type}")

        self._type_overrides[index] = txn_type
        self._category_overrides[index] = None

    def override_category(self, index: int, category_id: Optional[str]):
        """
        Set (or clear with None) a row's category

        Raises:
            ValueError: category doesn't exist for the row's type
        """
        txn_type = self.effective_type(index)
        if category_id is not None:
            if not any(c.id == category_id for c in self.categories_for(txn_type)):
                raise ValueError(f"Category {category_id} is not a {txn_type} category")

        self._category_overrides[index] = category_id

    def pending_rows(self) -> List[int]:
        """Indexes of rows that still need a category"""
        return [i for i in range(len(self._drafts)) if not self.effective_category_id(i)]

    def ready_to_commit(self) -> bool:
        return bool(self._drafts) and not self.pending_rows()

    def commit_records(self, user_id: Optional[str] = None) -> List[Dict]:
        """
        Build one database record per draft

        Args:
            user_id: Owner (default: the session's user_id)

        Returns:
            List of dicts for the transacoes_financeiras table

        Raises:
            ValueError: no owning user
            UncategorizedRowsError: some rows have no category
        """
        owner = user_id or self.user_id
        if not owner:
            raise ValueError("A user id is required to commit transactions")

        pending = self.pending_rows()
        if pending:
            raise UncategorizedRowsError(pending)

        records = []
        for index, draft in enumerate(self._drafts):
            timestamp = datetime.combine(draft.date, time(), tzinfo=timezone.utc)
            records.append({
                'descricao': draft.description,
                'valor': draft.amount,
                'tipo': DB_TYPE_NAMES[self.effective_type(index)],
                'data': timestamp.isoformat(),
                'categoria_id': self.effective_category_id(index),
                'user_id': owner,
            })
        return records

    def print_stats(self):
        """Print import statistics"""
        total = self.stats['total']
        if total == 0:
            print("No transactions imported yet")
            if self.stats['skipped']:
                print(f"  ⏭️  Skipped rows: {self.stats['skipped']}")
            return

        print("\n" + "=" * 80)
        print("📊 IMPORT STATISTICS")
        print("=" * 80)
        print(f"Transactions: {total}")
        print(f"  ⏭️  Skipped rows: {self.stats['skipped']}")
        print(f"\n💰 Types:")
        print(f"  • Receipts: {self.stats['receipts']} ({self.stats['receipts']/total*100:.1f}%)")
        print(f"  • Expenses: {self.stats['expenses']} ({self.stats['expenses']/total*100:.1f}%)")
        print(f"\n🏷️  Categories:")
        print(f"  • Suggested: {self.stats['suggested']} ({self.stats['suggested']/total*100:.1f}%)")
        print(f"  • Needs review: {self.stats['needs_review']} ({self.stats['needs_review']/total*100:.1f}%)")
        print("=" * 80)


def load_categories_from_db(conn, user_id: Optional[str] = None) -> List[Category]:
    """Load financial categories from database (optionally for one user)"""
    cursor = conn.cursor()
    query = "SELECT id, nome, tipo FROM categorias_financeiras"
    params = ()
    if user_id:
        query += " WHERE user_id = %s"
        params = (user_id,)
    query += " ORDER BY nome"
    cursor.execute(query, params)

    categories = []
    for row in cursor.fetchall():
        txn_type = TYPES_BY_DB_NAME.get(row[2])
        if txn_type is None:
            logger.warning("Ignoring category %s with unknown type %r", row[0], row[2])
            continue
        categories.append(Category(id=str(row[0]), name=row[1], type=txn_type))

    cursor.close()
    return categories
