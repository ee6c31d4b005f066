from decimal import Decimal

import pytest

from luthier_finance.core.models import Category, RECEIPT, EXPENSE
from luthier_finance.core.rule_matcher import (
    CategoryRule,
    DEFAULT_RULES,
    RuleMatcher,
)


@pytest.fixture
def matcher(categories):
    return RuleMatcher(categories)


def test_wire_receipt_resolves_to_luthier_services(matcher):
    result = matcher.categorize("Pix recebido cliente", Decimal("150"), RECEIPT)

    assert result.category_id == "cat-serv"
    assert result.tag_source == "rule"
    assert result.matched_rule == 0


def test_fuel_expense_resolves_to_fuel(matcher):
    assert matcher.suggest_category("Posto Cascol combustivel", Decimal("200"), EXPENSE) == "cat-comb"


def test_exception_blocks_wire_receipt_rule(matcher):
    assert matcher.suggest_category("Pix recebido supermercado", Decimal("80"), RECEIPT) is None


def test_exception_falls_through_to_later_rule(matcher):
    result = matcher.categorize("Pagamento recebido mercado produto", Decimal("80"), RECEIPT)

    assert result.category_id == "cat-vendas"
    assert result.matched_rule == 1


def test_rules_only_apply_to_their_type(matcher):
    assert matcher.suggest_category("Venda balcão", Decimal("10"), RECEIPT) == "cat-vendas"
    assert matcher.suggest_category("Venda balcão", Decimal("10"), EXPENSE) is None


def test_missing_category_makes_rule_non_matching(categories):
    without_services = [c for c in categories if c.name != "Serviços Luthieria"]
    matcher = RuleMatcher(without_services)

    assert matcher.suggest_category("Pix recebido venda", Decimal("10"), RECEIPT) == "cat-vendas"


def test_category_type_must_match():
    matcher = RuleMatcher([Category("c1", "Combustível", RECEIPT)])
    assert matcher.suggest_category("Posto Shell", Decimal("90"), EXPENSE) is None


def test_category_name_match_is_case_insensitive():
    matcher = RuleMatcher([Category("c1", "SERVIÇOS LUTHIERIA", RECEIPT)])
    assert matcher.suggest_category("PIX RECEBIDO", Decimal("90"), RECEIPT) == "c1"


def test_authored_order_groceries_before_utilities(matcher):
    # "conta" is a utilities keyword, "supermercado" a groceries one
    assert matcher.suggest_category("Supermercado conta 22", Decimal("45"), EXPENSE) == "cat-alim"


def test_reordering_overlapping_rules_changes_winner(categories):
    groceries = CategoryRule("Alimentação", ("supermercado",))
    utilities = CategoryRule("Utilidades", ("conta",))

    first = RuleMatcher(categories, rules={EXPENSE: (groceries, utilities)})
    second = RuleMatcher(categories, rules={EXPENSE: (utilities, groceries)})

    assert first.suggest_category("Supermercado conta", None, EXPENSE) == "cat-alim"
    assert second.suggest_category("Supermercado conta", None, EXPENSE) == "cat-util"


def test_reordering_non_overlapping_rules_keeps_outcome(categories):
    fuel = CategoryRule("Combustível", ("posto",))
    materials = CategoryRule("Materiais", ("cordas",))

    for rules in ((fuel, materials), (materials, fuel)):
        matcher = RuleMatcher(categories, rules={EXPENSE: rules})
        assert matcher.suggest_category("Posto BR", None, EXPENSE) == "cat-comb"
        assert matcher.suggest_category("Cordas Elixir", None, EXPENSE) == "cat-mat"


def test_purchase_fallback(matcher):
    result = matcher.categorize("Compra cartão loja X", Decimal("30"), EXPENSE)

    assert result.category_id == "cat-alim"
    assert result.tag_source == "fallback"


def test_fallback_category_is_configurable(categories):
    matcher = RuleMatcher(categories, fallback_category="Outros")
    assert matcher.suggest_category("Débito automático", Decimal("30"), EXPENSE) == "cat-outros"


def test_fallback_can_be_disabled(categories):
    matcher = RuleMatcher(categories, fallback_category=None)
    assert matcher.suggest_category("Compra cartão loja X", Decimal("30"), EXPENSE) is None


def test_fallback_needs_the_category_to_exist():
    matcher = RuleMatcher([Category("c1", "Outros", EXPENSE)])
    assert matcher.suggest_category("Compra cartão loja X", Decimal("30"), EXPENSE) is None


def test_no_match_is_not_an_error(matcher):
    result = matcher.categorize("Transferência ABC", Decimal("10"), EXPENSE)

    assert result.category_id is None
    assert result.tag_source == "none"
    assert matcher.suggest_category("", None, EXPENSE) is None
    assert matcher.suggest_category(None, None, RECEIPT) is None
    assert matcher.suggest_category("Pix recebido", None, "unknown") is None


def test_rule_exceptions_are_checked_on_lowercased_text():
    rule = DEFAULT_RULES[RECEIPT][0]
    assert rule.matches("pix recebido cliente")
    assert not rule.matches("pix recebido mercado central")


def test_stats_count_outcomes(matcher):
    matcher.suggest_category("Pix recebido cliente", None, RECEIPT)
    matcher.suggest_category("Compra cartão loja X", None, EXPENSE)
    matcher.suggest_category("Transferência ABC", None, EXPENSE)

    assert matcher.stats["matches"] == 1
    assert matcher.stats["fallback"] == 1
    assert matcher.stats["no_match"] == 1
    assert matcher.stats["by_category"] == {"Serviços Luthieria": 1, "Alimentação": 1}


def test_print_stats(matcher, capsys):
    matcher.print_stats()
    assert "No transactions processed yet" in capsys.readouterr().out

    matcher.suggest_category("Pix recebido cliente", None, RECEIPT)
    matcher.print_stats()
    out = capsys.readouterr().out
    assert "Rule match: 1" in out
    assert "Serviços Luthieria: 1" in out
