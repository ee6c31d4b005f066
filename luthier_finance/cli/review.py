#!/usr/bin/env python3
"""
Import review prompts

Interactive tool to set the type and category of imported rows before they
are committed.
"""
from typing import List, Optional, Tuple

from luthier_finance.core.formatters import format_currency, format_date_only
from luthier_finance.core.import_session import ImportSession
from luthier_finance.core.models import Category, RECEIPT, EXPENSE

TYPE_LABELS = {
    RECEIPT: 'Receita',
    EXPENSE: 'Saída',
}


def category_name(session: ImportSession, category_id: Optional[str]) -> str:
    """Name of a category id ('-' when unset)"""
    for category in session.categories:
        if category.id == category_id:
            return category.name
    return '-'


def display_draft(session: ImportSession, index: int, position: int, total: int):
    """Display draft details"""
    draft = session.drafts[index]

    print("\n" + "=" * 80)
    print(f"Row {position}/{total} (line {draft.line_number})")
    print("=" * 80)
    print(f"Description:  {draft.description[:60]}")
    print(f"Amount:       {format_currency(draft.amount)}")
    print(f"Date:         {format_date_only(draft.date)}")
    print(f"Type:         {TYPE_LABELS[session.effective_type(index)]}")
    print(f"Category:     {category_name(session, session.effective_category_id(index))}")


def display_categories(categories: List[Category]):
    """Display available categories"""
    print("\n📂 Available Categories:")
    print("-" * 80)

    for i, category in enumerate(categories, 1):
        print(f"{i:2d}. {category.name}")


def get_user_choice(prompt: str, max_value: int, allow_skip: bool = True) -> int:
    """Get user's numeric choice (-1 = skip, -2 = quit)"""
    while True:
        skip_text = " (or 's' to skip)" if allow_skip else ""
        user_input = input(f"\n{prompt} (1-{max_value}){skip_text}: ").strip().lower()

        if allow_skip and user_input == 's':
            return -1

        if user_input == 'q':
            return -2

        try:
            choice = int(user_input)
            if 1 <= choice <= max_value:
                return choice
            else:
                print(f"❌ Please enter a number between 1 and {max_value}")
        except ValueError:
            print(f"❌ Invalid input. Please enter a number.")


def review_session(session: ImportSession, only_pending: bool = True) -> Tuple[int, int]:
    """
    Walk through the session's rows and let the user fix type and category

    Args:
        session: Loaded import session
        only_pending: Only show rows without a category

    Returns:
        (reviewed, skipped)
    """
    indexes = session.pending_rows() if only_pending else list(range(len(session)))

    if not indexes:
        print("\n🎉 Nothing to review! Every row has a category.")
        return 0, 0

    reviewed = 0
    skipped = 0

    for position, index in enumerate(indexes, 1):
        display_draft(session, index, position, len(indexes))

        other_type = EXPENSE if session.effective_type(index) == RECEIPT else RECEIPT

        print("\n⚙️  Options:")
        print("   1. Choose category")
        print(f"   2. Switch type to {TYPE_LABELS[other_type]} and choose category")
        print("   3. Skip to next")
        print("   4. Quit review")

        action = input("\nChoose action (1-4): ").strip().lower()

        if action == '4' or action == 'q':
            break

        if action == '3' or action == 's':
            skipped += 1
            continue

        if action == '2':
            session.override_type(index, other_type)
            print(f"   ✅ Type changed to {TYPE_LABELS[other_type]}")
        elif action != '1':
            print("❌ Invalid choice, skipping...")
            skipped += 1
            continue

        categories = session.categories_for(session.effective_type(index))
        if not categories:
            print(f"⚠️  No {TYPE_LABELS[session.effective_type(index)]} categories available")
            skipped += 1
            continue

        display_categories(categories)
        choice = get_user_choice("Select category", len(categories))

        if choice == -2:  # Quit
            break
        if choice == -1:  # Skip
            skipped += 1
            continue

        category = categories[choice - 1]
        session.override_category(index, category.id)
        print(f"   ✅ Categorized as {category.name}")
        reviewed += 1

    print("\n" + "=" * 80)
    print("📊 REVIEW SUMMARY")
    print("=" * 80)
    print(f"✅ Categorized: {reviewed}")
    print(f"⏭️  Skipped: {skipped}")

    remaining = session.pending_rows()
    if remaining:
        print(f"⚠️  Still need a category: {len(remaining)}")
    else:
        print(f"🎉 All rows categorized!")
    print("=" * 80)

    return reviewed, skipped
