import pytest

from luthier_finance.cli import review
from luthier_finance.cli.review import get_user_choice, review_session
from luthier_finance.core.import_session import ImportSession
from luthier_finance.core.models import RECEIPT, EXPENSE


@pytest.fixture
def session(categories, statement_csv):
    session = ImportSession(categories, user_id="user-1")
    session.load(statement_csv)
    return session


def feed_input(monkeypatch, answers):
    answers = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))


def test_choose_category_for_pending_row(session, monkeypatch, capsys):
    # expense categories: Combustível, Alimentação, Telecomunicações, Materiais, Utilidades, Outros
    feed_input(monkeypatch, ["1", "6"])

    assert review_session(session) == (1, 0)
    assert session.effective_category_id(2) == "cat-outros"
    assert session.ready_to_commit()
    assert "All rows categorized" in capsys.readouterr().out


def test_switch_type_then_choose_category(session, monkeypatch):
    feed_input(monkeypatch, ["2", "2"])

    assert review_session(session) == (1, 0)
    assert session.effective_type(2) == RECEIPT
    assert session.effective_category_id(2) == "cat-vendas"


def test_skip_and_quit(session, monkeypatch):
    feed_input(monkeypatch, ["3"])
    assert review_session(session) == (0, 1)
    assert session.pending_rows() == [2]

    feed_input(monkeypatch, ["q"])
    assert review_session(session) == (0, 0)


def test_skip_from_category_prompt(session, monkeypatch):
    feed_input(monkeypatch, ["1", "s"])
    assert review_session(session) == (0, 1)
    assert session.effective_category_id(2) is None


def test_invalid_action_counts_as_skip(session, monkeypatch):
    feed_input(monkeypatch, ["9"])
    assert review_session(session) == (0, 1)


def test_review_all_rows(session, monkeypatch):
    # row 0: keep type, pick Serviços; row 1: switch to receipt, pick Vendas; row 2: quit
    feed_input(monkeypatch, ["1", "1", "2", "2", "4"])

    assert review_session(session, only_pending=False) == (2, 0)
    assert session.effective_category_id(0) == "cat-serv"
    assert session.effective_type(1) == RECEIPT
    assert session.effective_category_id(1) == "cat-vendas"
    assert session.effective_type(2) == EXPENSE


def test_nothing_to_review(session, monkeypatch, capsys):
    session.override_category(2, "cat-outros")
    monkeypatch.setattr("builtins.input", lambda prompt="": pytest.fail("should not prompt"))

    assert review_session(session) == (0, 0)
    assert "Nothing to review" in capsys.readouterr().out


def test_get_user_choice_retries_until_valid(monkeypatch, capsys):
    feed_input(monkeypatch, ["99", "abc", "2"])

    assert get_user_choice("Select category", 3) == 2
    out = capsys.readouterr().out
    assert "between 1 and 3" in out
    assert "Invalid input" in out


def test_get_user_choice_skip_and_quit(monkeypatch):
    feed_input(monkeypatch, ["s"])
    assert get_user_choice("Select", 3) == -1

    feed_input(monkeypatch, ["q"])
    assert get_user_choice("Select", 3) == -2


def test_category_name(session):
    assert review.category_name(session, "cat-comb") == "Combustível"
    assert review.category_name(session, None) == "-"
