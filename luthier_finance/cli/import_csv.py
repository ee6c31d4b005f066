#!/usr/bin/env python3
"""
Transaction import CLI

Imports a bank statement CSV into the shop's financial transactions.
"""
import argparse
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import psycopg2
from dotenv import load_dotenv

from luthier_finance.logging_setup import configure_logging
from luthier_finance.utils.db_connection import get_db_connection
from luthier_finance.core.formatters import format_currency, format_date_only
from luthier_finance.core.import_session import ImportSession, load_categories_from_db
from luthier_finance.core.models import RECEIPT
from luthier_finance.core.rule_matcher import RuleMatcher, DEFAULT_FALLBACK_CATEGORY
from luthier_finance.cli.review import review_session, category_name


# Load environment variables
load_dotenv()


def insert_transactions(conn, records: List[Dict]) -> Tuple[int, int]:
    """
    Insert transaction records, each in its own database transaction

    A failing row is rolled back and counted; the others still go in.

    Returns:
        (inserted, errors)
    """
    cursor = conn.cursor()

    inserted = 0
    errors = 0

    for record in records:
        try:
            cursor.execute("""
                INSERT INTO transacoes_financeiras (
                    descricao, valor, tipo, data, categoria_id, user_id
                )
                VALUES (
                    %(descricao)s, %(valor)s, %(tipo)s, %(data)s,
                    %(categoria_id)s, %(user_id)s
                )
            """, record)

            conn.commit()
            inserted += 1

        except psycopg2.Error as e:
            conn.rollback()  # Only this row
            print(f"⚠️  Error: {e}")
            print(f"   Transaction: {record.get('descricao', 'unknown')[:50]}")
            errors += 1

    cursor.close()

    return inserted, errors


def print_sample(session: ImportSession, limit: int = 10):
    """Print the first rows of a session"""
    print(f"\n📋 Sample Results (first {limit}):")
    for index, draft in enumerate(session.drafts[:limit]):
        status = "✅" if session.effective_category_id(index) else "⚠️ "
        sign = "+" if session.effective_type(index) == RECEIPT else "-"
        category = category_name(session, session.effective_category_id(index))
        print(f"{status} {index + 1:2d}. {draft.description[:40]:<40} → {category}")
        print(f"       {format_date_only(draft.date)}  {sign}{format_currency(draft.amount):>14}")

    if len(session) > limit:
        print(f"       ... and {len(session) - limit} more")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Import bank statement CSV transactions')
    parser.add_argument('csv_file', help='Path to statement CSV file')
    parser.add_argument('--user-id', default=os.getenv('LUTHIER_USER_ID'),
                        help='Owner of the imported transactions (default: LUTHIER_USER_ID). '
                             'A dry run without one suggests from every user\'s categories')
    parser.add_argument('--fallback-category',
                        default=os.getenv('FALLBACK_EXPENSE_CATEGORY', DEFAULT_FALLBACK_CATEGORY),
                        help='Expense category for unmatched purchases/debits')
    parser.add_argument('--encoding', default='utf-8', help='CSV file encoding')
    parser.add_argument('--review', action='store_true', help='Review rows without a category')
    parser.add_argument('--dry-run', action='store_true', help='Parse and categorize but do not insert')
    parser.add_argument('--log-level', default=None, help='Log level (default: LUTHIER_FINANCE_LOG_LEVEL or INFO)')
    return parser


def main(argv: Optional[List[str]] = None):
    """Main import function"""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        print(f"❌ File not found: {csv_path}")
        sys.exit(1)

    if not args.dry_run and not args.user_id:
        print("❌ A user id is required (--user-id or LUTHIER_USER_ID)")
        sys.exit(1)

    print("=" * 80)
    print("📥 TRANSACTION IMPORT")
    print("=" * 80)
    print(f"CSV File: {csv_path}")
    print(f"User: {args.user_id or '-'}")
    if not args.user_id:
        print("⚠️  No user id: suggestions use every user's categories")
    print(f"Review: {args.review}")
    print(f"Dry Run: {args.dry_run}")
    print("=" * 80)

    # Connect to database
    print("\n🔌 Connecting to database...")
    try:
        conn = get_db_connection()
        print("   ✅ Connected")
    except psycopg2.Error as e:
        print(f"   ❌ Connection failed: {e}")
        sys.exit(1)

    try:
        print("\n📚 Loading categories...")
        categories = load_categories_from_db(conn, args.user_id)
        print(f"   ✅ Loaded {len(categories)} categories")

        matcher = RuleMatcher(categories, fallback_category=args.fallback_category or None)
        session = ImportSession(categories, matcher=matcher, user_id=args.user_id)

        print(f"\n📄 Parsing CSV file...")
        session.load_file(csv_path, encoding=args.encoding)

        if not len(session):
            print("\n⚠️  Nothing to import: no usable rows found")
            print("   The file needs Data, Valor and Descrição columns")
            return

        session.print_stats()
        print_sample(session)

        if args.review:
            review_session(session)

        if args.dry_run:
            print(f"\n🔍 DRY RUN - Not inserting into database")
            return

        pending = session.pending_rows()
        if pending:
            print(f"\n⚠️  {len(pending)} rows still need a category. Run again with --review.")
            sys.exit(1)

        print(f"\n💾 Inserting into database...")
        records = session.commit_records()
        inserted, errors = insert_transactions(conn, records)

        print(f"   ✅ Inserted: {inserted}")
        if errors > 0:
            print(f"   ❌ Errors: {errors}")

        print("\n" + "=" * 80)
        print("✅ Import complete!")
        print("=" * 80)

    except Exception as e:
        print(f"\n❌ Import failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
