"""Quadro Kanban das ordens de produção.

O quadro guarda os cartões num único dicionário (id -> cartão) mais a sequência
de exibição; as colunas são sempre calculadas a partir dele. Arrastar e soltar
segue: iniciar_arraste -> arrastar_sobre (opcional) -> soltar ou cancelar_arraste.

Ao soltar numa coluna diferente o cartão muda de coluna na hora e o callback
``persistir(ordem_id, destino)`` grava o novo status; se ele levantar
``PCPError`` o cartão volta para a coluna de origem.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from pcp import status as st
from pcp.errors import PCPError, RegistroNaoEncontrado

logger = logging.getLogger(__name__)


@dataclass
class Cartao:
    id: int
    codigo: str
    produto_nome: str
    quantidade: int
    prioridade: str
    status: Optional[str]
    data_entrega: str = ""
    observacoes: str = ""

    @classmethod
    def da_ordem(cls, ordem):
        return cls(
            id=ordem.id,
            codigo=ordem.codigo,
            produto_nome=ordem.produto_nome,
            quantidade=ordem.quantidade,
            prioridade=ordem.prioridade,
            status=ordem.status,
            data_entrega=ordem.data_entrega.isoformat() if ordem.data_entrega else "",
            observacoes=ordem.observacoes or "",
        )

    def to_dict(self):
        return {
            "id": self.id,
            "orderId": self.codigo,
            "productName": self.produto_nome,
            "quantity": self.quantidade,
            "priority": self.prioridade,
            "status": self.status,
            "dueDate": self.data_entrega,
            "notes": self.observacoes,
        }


@dataclass
class ResultadoArraste:
    movido: bool
    ordem_id: Optional[int] = None
    origem: Optional[str] = None
    destino: Optional[str] = None
    mensagem: str = ""
    erro: Optional[PCPError] = field(default=None, repr=False)


class QuadroKanban:
    def __init__(self, persistir: Callable[[int, str], object]):
        self._persistir = persistir
        self._cartoes: Dict[int, Cartao] = {}
        self._sequencia: List[int] = []
        self.ativo: Optional[int] = None
        self.sobre: Optional[str] = None

    # ------------------------- carga -------------------------
    def carregar(self, ordens):
        self._cartoes = {}
        self._sequencia = []
        self.ativo = None
        self.sobre = None

        for ordem in ordens:
            cartao = Cartao.da_ordem(ordem)
            self._cartoes[cartao.id] = cartao
            self._sequencia.append(cartao.id)
            if cartao.status not in st.STATUS_VALIDOS:
                logger.warning("Ordem %s com status desconhecido (%r) fica fora do quadro", cartao.codigo, cartao.status)

        logger.debug("Quadro carregado com %d ordens", len(self._sequencia))

    # ------------------------- consulta -------------------------
    def colunas(self) -> Dict[str, List[Cartao]]:
        colunas = {status: [] for status in st.STATUS_VALIDOS}
        for ordem_id in self._sequencia:
            cartao = self._cartoes[ordem_id]
            if cartao.status in colunas:
                colunas[cartao.status].append(cartao)
        return colunas

    def cartao(self, ordem_id) -> Optional[Cartao]:
        return self._cartoes.get(ordem_id)

    def coluna_de(self, ordem_id) -> Optional[str]:
        cartao = self._cartoes.get(ordem_id)
        if cartao is None or cartao.status not in st.STATUS_VALIDOS:
            return None
        return cartao.status

    def to_dict(self):
        return {
            "columns": [
                {
                    "id": status,
                    "title": st.titulo(status),
                    "count": len(cartoes),
                    "orders": [c.to_dict() for c in cartoes],
                }
                for status, cartoes in self.colunas().items()
            ]
        }

    # ------------------------- arrastar e soltar -------------------------
    def iniciar_arraste(self, ordem_id):
        if self.coluna_de(ordem_id) is None:
            raise RegistroNaoEncontrado(f"Ordem {ordem_id} não está no quadro.")
        self.ativo = ordem_id
        self.sobre = None

    def arrastar_sobre(self, alvo) -> Optional[str]:
        if self.ativo is None:
            return None
        self.sobre = self._resolver_coluna(alvo)
        return self.sobre

    def cancelar_arraste(self):
        self.ativo = None
        self.sobre = None

    def soltar(self, alvo) -> ResultadoArraste:
        ordem_id = self.ativo
        self.cancelar_arraste()
        if ordem_id is None:
            return ResultadoArraste(movido=False, mensagem="Nenhum cartão sendo arrastado.")

        cartao = self._cartoes[ordem_id]
        origem = cartao.status
        destino = self._resolver_coluna(alvo)

        if destino is None:
            logger.debug("Ordem %s solta fora das colunas (%r)", cartao.codigo, alvo)
            return ResultadoArraste(False, ordem_id, origem, None, "Destino inválido; cartão voltou para a coluna.")

        if destino == origem:
            if alvo not in (destino, ordem_id):
                self._reordenar(ordem_id, alvo)
            return ResultadoArraste(False, ordem_id, origem, destino)

        # movimento otimista, desfeito se a gravação falhar
        cartao.status = destino
        try:
            self._persistir(ordem_id, destino)
        except PCPError as e:
            cartao.status = origem
            logger.info("Ordem %s voltou para %s: %s", cartao.codigo, origem, e)
            return ResultadoArraste(False, ordem_id, origem, destino, str(e), erro=e)

        logger.info("Ordem %s movida de %s para %s", cartao.codigo, origem, destino)
        return ResultadoArraste(
            True, ordem_id, origem, destino, f"Ordem {cartao.codigo} movida para {st.titulo(destino)}"
        )

    def _resolver_coluna(self, alvo) -> Optional[str]:
        if alvo in st.STATUS_VALIDOS:
            return alvo
        # solto sobre outro cartão: vale a coluna dele
        return self.coluna_de(alvo)

    def _reordenar(self, ordem_id, alvo_id):
        # só na memória; recarregar volta à ordem do banco
        self._sequencia.remove(ordem_id)
        self._sequencia.insert(self._sequencia.index(alvo_id), ordem_id)
