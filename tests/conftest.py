"""Shared fixtures: a luthier shop's categories and a small bank statement."""

import textwrap

import pytest

from luthier_finance.core.models import Category, RECEIPT, EXPENSE


SHOP_CATEGORIES = [
    Category("cat-serv", "Serviços Luthieria", RECEIPT),
    Category("cat-vendas", "Vendas", RECEIPT),
    Category("cat-comb", "Combustível", EXPENSE),
    Category("cat-alim", "Alimentação", EXPENSE),
    Category("cat-tele", "Telecomunicações", EXPENSE),
    Category("cat-mat", "Materiais", EXPENSE),
    Category("cat-util", "Utilidades", EXPENSE),
    Category("cat-outros", "Outros", EXPENSE),
]


def dedent(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


@pytest.fixture
def categories():
    return list(SHOP_CATEGORIES)


@pytest.fixture
def statement_csv() -> str:
    # Line 4 has a bad date, line 5 matches no rule
    return dedent(
        """
        Data,Descrição,Valor
        15/03/2024,Pix recebido cliente,150,00
        2024-03-16,Posto Cascol combustivel,-200,00
        not-a-date,Compra,abc
        17/03/2024,Loja desconhecida,-35,90
        """
    )
