"""Motor de status das ordens de produção.

``avaliar_transicao`` só decide: recebe a ordem, o produto com a ficha técnica e
as matérias-primas envolvidas, e devolve ``Aprovada`` (com as baixas de estoque)
ou ``Rejeitada`` (com o motivo). ``aplicar_transicao`` é o único caminho que
grava status: relê ordem e estoque dentro da transação, decide de novo e grava
baixas e status juntos.

Fluxo: pendente -> em_producao -> concluida. Cancelada a partir de pendente ou
em_producao. Só a entrada em produção consome matéria-prima.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Tuple, Union

from pcp import status as st
from pcp.errors import EstoqueInsuficiente, RegistroNaoEncontrado, TransicaoInvalida
from pcp.store import MATERIAS_PRIMAS, ORDENS

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _d(v) -> Decimal:
    if v is None:
        return ZERO
    if isinstance(v, Decimal):
        return v
    return Decimal(str(v))


@dataclass(frozen=True)
class Aprovada:
    novo_status: str
    # (materia_prima_id, novo_estoque)
    baixas: Tuple[Tuple[int, Decimal], ...] = ()


@dataclass(frozen=True)
class Rejeitada:
    motivo: str
    # (materia_prima_id, necessario, disponivel)
    faltas: Tuple[Tuple[int, Decimal, Decimal], ...] = ()

    def como_erro(self):
        if self.faltas:
            return EstoqueInsuficiente(self.motivo, self.faltas)
        return TransicaoInvalida(self.motivo)


Decisao = Union[Aprovada, Rejeitada]


def necessidades(produto, quantidade) -> dict:
    """Consumo total por matéria-prima: qtd_por_unidade x quantidade da ordem."""
    total = {}
    for item in produto.materiais_necessarios:
        usado = _d(item.qtd_por_unidade) * int(quantidade or 0)
        total[item.materia_prima_id] = total.get(item.materia_prima_id, ZERO) + usado
    return total


def avaliar_transicao(ordem, produto, materiais: Mapping[int, object], destino: str) -> Decisao:
    origem = ordem.status

    if origem in st.TERMINAIS:
        return Rejeitada(f"Ordem {ordem.codigo} está {st.titulo(origem)} e não pode mudar de status.")
    if not st.permitida(origem, destino):
        return Rejeitada(
            f"Transição de {st.titulo(origem) or 'sem status'} para {st.titulo(destino)} não é permitida."
        )
    if not st.exige_estoque(origem, destino):
        return Aprovada(destino)

    if produto is None:
        return Rejeitada(f"Produto da ordem {ordem.codigo} não encontrado; ficha técnica não pode ser conferida.")

    faltas, motivos, baixas = [], [], []
    for materia_prima_id, necessario in necessidades(produto, ordem.quantidade).items():
        mat = materiais.get(materia_prima_id)
        if mat is None:
            return Rejeitada(f"Matéria-prima #{materia_prima_id} da ficha técnica não encontrada.")

        disponivel = _d(mat.estoque_atual)
        if necessario > disponivel:
            faltas.append((materia_prima_id, necessario, disponivel))
            motivos.append(f"{mat.nome} (necessário {necessario}, disponível {disponivel})")
            continue

        novo = disponivel - necessario
        if novo < ZERO:
            logger.warning("Baixa de %s limitada a zero (estoque %s, uso %s)", mat.nome, disponivel, necessario)
        baixas.append((materia_prima_id, max(ZERO, novo)))

    if faltas:
        return Rejeitada("Estoque insuficiente: " + "; ".join(motivos), tuple(faltas))
    return Aprovada(destino, tuple(baixas))


def aplicar_transicao(store, ordem_id, destino) -> Aprovada:
    if destino not in st.STATUS_VALIDOS:
        raise TransicaoInvalida(f"Status desconhecido: {destino}")

    with store.transacao():
        ordem = store.obter(ORDENS, ordem_id, bloquear=True)
        if ordem is None:
            raise RegistroNaoEncontrado(f"Ordem {ordem_id} não encontrada.")

        origem = ordem.status
        produto = ordem.produto
        materiais = {}
        if st.exige_estoque(origem, destino) and produto is not None:
            ids = {item.materia_prima_id for item in produto.materiais_necessarios}
            if ids:
                # estoque relido e travado aqui, não o que a tela carregou
                materiais = {m.id: m for m in store.listar(MATERIAS_PRIMAS, ids=ids, bloquear=True)}

        decisao = avaliar_transicao(ordem, produto, materiais, destino)
        if isinstance(decisao, Rejeitada):
            logger.info("Ordem %s: %s -> %s recusada: %s", ordem.codigo, origem, destino, decisao.motivo)
            raise decisao.como_erro()

        for materia_prima_id, novo_estoque in decisao.baixas:
            store.atualizar(MATERIAS_PRIMAS, materia_prima_id, {"estoque_atual": novo_estoque})
        store.atualizar(ORDENS, ordem_id, {"status": decisao.novo_status})
        codigo = ordem.codigo

    logger.info("Ordem %s: %s -> %s (%d baixas de estoque)", codigo, origem, destino, len(decisao.baixas))
    return decisao


def avancar(store, ordem_id) -> Aprovada:
    """Botão da lista: Iniciar Produção / Finalizar."""
    ordem = store.obter(ORDENS, ordem_id)
    if ordem is None:
        raise RegistroNaoEncontrado(f"Ordem {ordem_id} não encontrada.")

    destino = st.PROXIMO.get(ordem.status)
    if destino is None:
        raise TransicaoInvalida(f"Ordem {ordem.codigo} está {st.titulo(ordem.status)} e não pode avançar.")
    return aplicar_transicao(store, ordem_id, destino)


def cancelar(store, ordem_id) -> Aprovada:
    return aplicar_transicao(store, ordem_id, st.CANCELADA)
