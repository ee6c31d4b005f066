"""
Rule Matcher Engine

Suggests a financial category for an imported transaction:
- Ordered keyword rules per transaction type (first match wins)
- Optional exception keywords that veto a rule
- Rules only count when their target category exists for that type
- Fallback for purchases/debits with no matching rule
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from luthier_finance.logging_setup import get_logger
from .models import Category, RECEIPT, EXPENSE

logger = get_logger(__name__)

# Expense category tried when nothing else matches a purchase or debit
DEFAULT_FALLBACK_CATEGORY = 'Alimentação'
FALLBACK_KEYWORDS = ('compra', 'débito')


@dataclass(frozen=True)
class CategoryRule:
    """Keywords that point to a category, unless an exception is present"""
    category: str
    keywords: Tuple[str, ...]
    exceptions: Tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        """True if text (lowercased) has a keyword and no exception"""
        if not any(keyword in text for keyword in self.keywords):
            return False
        return not any(exception in text for exception in self.exceptions)


@dataclass
class CategorizationResult:
    """Result of a category suggestion"""
    category_id: Optional[str]
    category_name: Optional[str]
    tag_source: str  # 'rule', 'fallback', 'none'
    matched_rule: Optional[int] = None
    rationale: Optional[str] = None


# Order matters: the first rule whose category exists wins
DEFAULT_RULES: Dict[str, Tuple[CategoryRule, ...]] = {
    RECEIPT: (
        CategoryRule(
            category='Serviços Luthieria',
            keywords=(
                'pix recebido',
                'transferência recebida',
                'recebida pelo pix',
                'transferência pix',
                'pagamento recebido',
                'ted recebida',
                'doc recebido',
            ),
            exceptions=('mercado', 'supermercado', 'alimentos', 'combustível'),
        ),
        CategoryRule(
            category='Vendas',
            keywords=('venda', 'pagamento', 'compra', 'produto'),
            exceptions=('compra no débito', 'compra no crédito'),
        ),
    ),
    EXPENSE: (
        CategoryRule(
            category='Combustível',
            keywords=(
                'combustivel', 'posto', 'cascol', 'auto posto',
                'gasolina', 'etanol', 'diesel',
            ),
        ),
        CategoryRule(
            category='Alimentação',
            keywords=(
                'mercado', 'supermercado', 'alimentos', 'panificadora',
                'acai', 'comercial de alimentos', 'verduras', 'sorveteria',
                'padaria', 'restaurante', 'lanchonete', 'cafeteria',
                'açougue', 'hortifruti',
            ),
        ),
        CategoryRule(
            category='Entretenimento',
            keywords=(
                'netflix', 'streaming', 'spotify', 'youtube', 'prime',
                'disney', 'hbo', 'cinema', 'ingresso',
            ),
        ),
        CategoryRule(
            category='Telecomunicações',
            keywords=(
                'internet', 'telefone', 'celular', 'recarga', 'tim',
                'vivo', 'claro', 'oi', 'net', 'móvel',
            ),
        ),
        CategoryRule(
            category='Materiais',
            keywords=(
                'vibratho', 'instrumentos', 'cordas', 'captador', 'tarraxa',
                'ponte', 'pestana', 'traste', 'madeira', 'ferramenta',
                'equipamento', 'peça', 'componente',
            ),
        ),
        CategoryRule(
            category='Utilidades',
            keywords=(
                'agua', 'luz', 'energia', 'saneamento', 'caesb', 'ceb',
                'neoenergia', 'conta', 'fatura',
            ),
        ),
        CategoryRule(
            category='Saúde',
            keywords=(
                'drogaria', 'farmacia', 'remedio', 'medicamento', 'consulta',
                'exame', 'médico', 'dentista', 'hospital', 'clínica',
            ),
        ),
        CategoryRule(
            category='Outros',
            keywords=(
                'pix enviado', 'transferência enviada', 'enviada pelo pix',
                'ted enviada', 'doc enviado', 'pagamento efetuado',
            ),
        ),
    ),
}


class RuleMatcher:
    """
    Matches transaction descriptions against ordered category rules
    """

    def __init__(self,
                 categories: Iterable[Category],
                 rules: Optional[Dict[str, Sequence[CategoryRule]]] = None,
                 fallback_category: Optional[str] = DEFAULT_FALLBACK_CATEGORY):
        """
        Args:
            categories: Available categories (both types)
            rules: Rules per transaction type (default: DEFAULT_RULES)
            fallback_category: Expense category name used for unmatched
                purchases/debits, or None to disable the fallback
        """
        self.categories = list(categories)
        self.fallback_category = fallback_category
        self.rules: Dict[str, List[CategoryRule]] = {}
        self.load_rules(DEFAULT_RULES if rules is None else rules)

        self.stats = {
            'matches': 0,
            'fallback': 0,
            'no_match': 0,
            'by_category': {},
        }

    def load_rules(self, rules: Dict[str, Sequence[CategoryRule]]):
        """Load rules per type, keeping the authored order"""
        self.rules = {txn_type: list(type_rules) for txn_type, type_rules in rules.items()}
        logger.debug("Loaded %d category rules",
                     sum(len(type_rules) for type_rules in self.rules.values()))

    def find_category(self, name: str, txn_type: str) -> Optional[Category]:
        """Find a category by name (case-insensitive) and exact type"""
        wanted = name.lower()
        for category in self.categories:
            if category.name.lower() == wanted and category.type == txn_type:
                return category
        return None

    def categorize(self,
                   description: str,
                   amount: Optional[Decimal],
                   txn_type: str) -> CategorizationResult:
        """
        Suggest a category for a transaction

        Args:
            description: Statement description
            amount: Absolute amount (context only, rules don't use it)
            txn_type: RECEIPT or EXPENSE

        Returns:
            CategorizationResult; category_id is None when nothing resolves
        """
        text = (description or '').lower()

        for index, rule in enumerate(self.rules.get(txn_type, ())):
            if not rule.matches(text):
                continue

            category = self.find_category(rule.category, txn_type)
            if category is None:
                # Rule points to a category this user doesn't have
                continue

            self._count_match('matches', category)
            return CategorizationResult(
                category_id=category.id,
                category_name=category.name,
                tag_source='rule',
                matched_rule=index,
                rationale=f"Matched {txn_type} rule {index} ({rule.category})",
            )

        if txn_type == EXPENSE and self.fallback_category:
            if any(keyword in text for keyword in FALLBACK_KEYWORDS):
                category = self.find_category(self.fallback_category, EXPENSE)
                if category is not None:
                    self._count_match('fallback', category)
                    return CategorizationResult(
                        category_id=category.id,
                        category_name=category.name,
                        tag_source='fallback',
                        rationale=f"Purchase/debit defaults to {category.name}",
                    )

        self.stats['no_match'] += 1
        return CategorizationResult(
            category_id=None,
            category_name=None,
            tag_source='none',
            rationale='No matching rule found',
        )

    def suggest_category(self,
                         description: str,
                         amount: Optional[Decimal],
                         txn_type: str) -> Optional[str]:
        """Return only the suggested category id (or None)"""
        return self.categorize(description, amount, txn_type).category_id

    def _count_match(self, key: str, category: Category):
        self.stats[key] += 1
        self.stats['by_category'][category.name] = \
            self.stats['by_category'].get(category.name, 0) + 1

    def print_stats(self):
        """Print matching statistics"""
        total = self.stats['matches'] + self.stats['fallback'] + self.stats['no_match']
        if total == 0:
            print("No transactions processed yet")
            return

        print("\n" + "=" * 80)
        print("📊 CATEGORY SUGGESTION STATISTICS")
        print("=" * 80)
        print(f"Total transactions: {total}")
        print(f"  ✅ Rule match: {self.stats['matches']} ({self.stats['matches']/total*100:.1f}%)")
        print(f"  ↪️  Fallback: {self.stats['fallback']} ({self.stats['fallback']/total*100:.1f}%)")
        print(f"  ❌ No match: {self.stats['no_match']} ({self.stats['no_match']/total*100:.1f}%)")

        if self.stats['by_category']:
            print(f"\nSuggestions by category:")
            for name, count in sorted(self.stats['by_category'].items(),
                                      key=lambda x: x[1], reverse=True):
                print(f"  • {name}: {count}")
        print("=" * 80)
