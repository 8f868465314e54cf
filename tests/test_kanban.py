from datetime import date
from types import SimpleNamespace

import pytest

from pcp import status as st
from pcp.errors import EstoqueInsuficiente, RegistroNaoEncontrado
from pcp.kanban import QuadroKanban


def _ordem(id, status, codigo=None, prioridade="normal", observacoes=None):
    return SimpleNamespace(
        id=id,
        codigo=codigo or f"OP-{id:03d}",
        produto_nome="Camiseta",
        quantidade=10,
        prioridade=prioridade,
        status=status,
        data_entrega=date(2026, 1, 15),
        observacoes=observacoes,
    )


class Gravador:
    """Callback de persistência que registra as chamadas e pode recusar."""

    def __init__(self, erro=None):
        self.chamadas = []
        self.erro = erro

    def __call__(self, ordem_id, destino):
        self.chamadas.append((ordem_id, destino))
        if self.erro is not None:
            raise self.erro


def _quadro(ordens, persistir=None):
    quadro = QuadroKanban(persistir or Gravador())
    quadro.carregar(ordens)
    return quadro


def _ids(quadro, coluna):
    return [c.id for c in quadro.colunas()[coluna]]


def test_colunas_particionam_por_status():
    quadro = _quadro([
        _ordem(1, st.PENDENTE),
        _ordem(2, st.EM_PRODUCAO),
        _ordem(3, st.PENDENTE),
        _ordem(4, st.CANCELADA),
    ])
    colunas = quadro.colunas()
    assert list(colunas) == list(st.STATUS_VALIDOS)
    assert _ids(quadro, st.PENDENTE) == [1, 3]
    assert _ids(quadro, st.EM_PRODUCAO) == [2]
    assert _ids(quadro, st.CONCLUIDA) == []
    assert _ids(quadro, st.CANCELADA) == [4]


def test_status_desconhecido_fica_fora_das_colunas():
    quadro = _quadro([_ordem(1, "arquivada"), _ordem(2, None), _ordem(3, st.PENDENTE)])
    todos = [c.id for cartoes in quadro.colunas().values() for c in cartoes]
    assert todos == [3]
    assert quadro.cartao(1) is not None
    assert quadro.coluna_de(1) is None
    with pytest.raises(RegistroNaoEncontrado):
        quadro.iniciar_arraste(1)


def test_to_dict_tem_titulo_e_contagem():
    quadro = _quadro([_ordem(1, st.EM_PRODUCAO, prioridade="urgente", observacoes="gola careca")])
    colunas = quadro.to_dict()["columns"]
    assert [c["id"] for c in colunas] == list(st.STATUS_VALIDOS)
    em_producao = colunas[1]
    assert em_producao["title"] == "Em Produção"
    assert em_producao["count"] == 1
    assert em_producao["orders"][0] == {
        "id": 1,
        "orderId": "OP-001",
        "productName": "Camiseta",
        "quantity": 10,
        "priority": "urgente",
        "status": st.EM_PRODUCAO,
        "dueDate": "2026-01-15",
        "notes": "gola careca",
    }


def test_soltar_em_outra_coluna_persiste():
    gravador = Gravador()
    quadro = _quadro([_ordem(1, st.EM_PRODUCAO)], gravador)

    quadro.iniciar_arraste(1)
    assert quadro.arrastar_sobre(st.CONCLUIDA) == st.CONCLUIDA
    resultado = quadro.soltar(st.CONCLUIDA)

    assert resultado.movido
    assert (resultado.origem, resultado.destino) == (st.EM_PRODUCAO, st.CONCLUIDA)
    assert resultado.mensagem == "Ordem OP-001 movida para Concluída"
    assert gravador.chamadas == [(1, st.CONCLUIDA)]
    assert _ids(quadro, st.CONCLUIDA) == [1]
    assert quadro.ativo is None


def test_soltar_sobre_cartao_usa_coluna_dele():
    gravador = Gravador()
    quadro = _quadro([_ordem(1, st.PENDENTE), _ordem(2, st.EM_PRODUCAO)], gravador)

    quadro.iniciar_arraste(1)
    resultado = quadro.soltar(2)

    assert resultado.movido
    assert resultado.destino == st.EM_PRODUCAO
    assert gravador.chamadas == [(1, st.EM_PRODUCAO)]


def test_falha_ao_gravar_devolve_cartao():
    erro = EstoqueInsuficiente("Estoque insuficiente: Tecido (necessário 6, disponível 5)")
    quadro = _quadro([_ordem(1, st.PENDENTE)], Gravador(erro))

    quadro.iniciar_arraste(1)
    resultado = quadro.soltar(st.EM_PRODUCAO)

    assert not resultado.movido
    assert resultado.erro is erro
    assert resultado.mensagem == erro.mensagem
    assert _ids(quadro, st.PENDENTE) == [1]
    assert _ids(quadro, st.EM_PRODUCAO) == []
    assert quadro.cartao(1).status == st.PENDENTE


def test_destino_invalido_nao_chama_persistencia():
    gravador = Gravador()
    quadro = _quadro([_ordem(1, st.PENDENTE)], gravador)

    for alvo in ("arquivada", 999, None):
        quadro.iniciar_arraste(1)
        resultado = quadro.soltar(alvo)
        assert not resultado.movido
        assert resultado.destino is None

    assert gravador.chamadas == []
    assert _ids(quadro, st.PENDENTE) == [1]


def test_mesma_coluna_reordena_sem_persistir():
    gravador = Gravador()
    quadro = _quadro([_ordem(1, st.PENDENTE), _ordem(2, st.PENDENTE), _ordem(3, st.PENDENTE)], gravador)

    quadro.iniciar_arraste(3)
    resultado = quadro.soltar(1)

    assert not resultado.movido
    assert _ids(quadro, st.PENDENTE) == [3, 1, 2]
    assert gravador.chamadas == []


def test_soltar_na_propria_coluna_ou_no_proprio_cartao():
    gravador = Gravador()
    quadro = _quadro([_ordem(1, st.PENDENTE), _ordem(2, st.PENDENTE)], gravador)

    for alvo in (st.PENDENTE, 2):
        quadro.iniciar_arraste(2)
        assert not quadro.soltar(alvo).movido

    assert _ids(quadro, st.PENDENTE) == [1, 2]
    assert gravador.chamadas == []


def test_soltar_sem_arraste_ou_apos_cancelar():
    gravador = Gravador()
    quadro = _quadro([_ordem(1, st.PENDENTE)], gravador)

    assert not quadro.soltar(st.EM_PRODUCAO).movido

    quadro.iniciar_arraste(1)
    quadro.cancelar_arraste()
    assert quadro.arrastar_sobre(st.EM_PRODUCAO) is None
    assert not quadro.soltar(st.EM_PRODUCAO).movido
    assert gravador.chamadas == []


def test_arrastar_sobre_cartao_resolve_coluna():
    quadro = _quadro([_ordem(1, st.PENDENTE), _ordem(2, st.CANCELADA)])
    quadro.iniciar_arraste(1)
    assert quadro.arrastar_sobre(2) == st.CANCELADA
    assert quadro.arrastar_sobre("nada") is None


def test_recarregar_descarta_arraste():
    quadro = _quadro([_ordem(1, st.PENDENTE)])
    quadro.iniciar_arraste(1)
    quadro.carregar([_ordem(1, st.EM_PRODUCAO)])
    assert quadro.ativo is None
    assert _ids(quadro, st.EM_PRODUCAO) == [1]
