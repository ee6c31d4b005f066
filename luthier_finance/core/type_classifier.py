"""
Transaction Type Classifier

Decides whether a statement line is a receipt (money in) or an expense
(money out) from the wording of its description, falling back to the sign
of the amount.
"""
from decimal import Decimal
from typing import Union

from .models import RECEIPT, EXPENSE

# Checked first: a description matching both lists is a receipt
RECEIPT_KEYWORDS = (
    'recebido',
    'recebimento',
    'pagamento recebido',
    'transferência recebida',
    'pix recebido',
    'ted recebida',
    'doc recebido',
    'depósito',
    'venda',
    'serviço',
    'ordem de serviço',
)

EXPENSE_KEYWORDS = (
    'pagamento',
    'compra',
    'fatura',
    'boleto',
    'conta',
    'transferência enviada',
    'pix enviado',
    'ted enviada',
    'doc enviado',
    'débito',
    'despesa',
)


def classify_transaction(description: str, signed_amount: Union[Decimal, float, int]) -> str:
    """
    Classify a transaction as receipt or expense

    Args:
        description: Statement description
        signed_amount: Parsed amount, before taking the absolute value

    Returns:
        RECEIPT or EXPENSE
    """
    text = (description or '').lower()

    if any(keyword in text for keyword in RECEIPT_KEYWORDS):
        return RECEIPT
    if any(keyword in text for keyword in EXPENSE_KEYWORDS):
        return EXPENSE

    return RECEIPT if signed_amount >= 0 else EXPENSE
