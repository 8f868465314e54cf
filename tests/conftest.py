"""Fixtures de teste.

Cada teste recebe um app novo com SQLite em memória e o contexto de app já
empilhado, então os testes de serviço (motor, store) usam ``db.session``
direto e os de rota usam ``client``.
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from config import TestConfig
from pcp import create_app
from pcp.extensions import db
from pcp.models import MateriaPrima, MaterialNecessario, OrdemProducao, Produto


@pytest.fixture
def app():
    app = create_app(TestConfig)
    ctx = app.app_context()
    ctx.push()
    yield app
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


def nova_materia(nome, estoque, minimo="0", unidade="m"):
    mat = MateriaPrima(
        nome=nome,
        unidade=unidade,
        estoque_atual=Decimal(str(estoque)),
        estoque_minimo=Decimal(str(minimo)),
        ativo=True,
    )
    db.session.add(mat)
    db.session.commit()
    return mat


def novo_produto(nome, ficha=()):
    """``ficha``: pares (materia_prima, qtd_por_unidade)."""
    produto = Produto(nome=nome, ativo=True)
    for mat, qtd in ficha:
        produto.materiais_necessarios.append(
            MaterialNecessario(materia_prima_id=mat.id, qtd_por_unidade=Decimal(str(qtd)))
        )
    db.session.add(produto)
    db.session.commit()
    return produto


def nova_ordem(produto, quantidade, status="pendente", codigo="OP-001", prioridade="normal"):
    ordem = OrdemProducao(
        codigo=codigo,
        produto_id=produto.id if produto is not None else None,
        quantidade=quantidade,
        prioridade=prioridade,
        status=status,
        data_entrega=date.today() + timedelta(days=7),
    )
    db.session.add(ordem)
    db.session.commit()
    return ordem


@pytest.fixture
def camiseta(app):
    """Camiseta: 2 m de Tecido por unidade, Tecido com 5 m em estoque."""
    tecido = nova_materia("Tecido", 5)
    produto = novo_produto("Camiseta", [(tecido, 2)])
    return produto, tecido
