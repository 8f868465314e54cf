"""Acesso às coleções (ordens, produtos, matérias-primas) pela sessão do SQLAlchemy.

O ``DocumentStore`` expõe o mínimo que as telas precisam: listar tudo, obter por
id, atualizar campos, criar registro e um bloco transacional. Fora de
``transacao()`` cada escrita é confirmada na hora; dentro dele as escritas só
vão para o banco no final, todas juntas.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from pcp.errors import ErroPersistencia, ErroValidacao, RegistroNaoEncontrado
from pcp.extensions import db
from pcp.models import MateriaPrima, OrdemProducao, Produto

logger = logging.getLogger(__name__)

ORDENS = "ordens_producao"
PRODUTOS = "produtos"
MATERIAS_PRIMAS = "materias_primas"

COLECOES = {
    ORDENS: OrdemProducao,
    PRODUTOS: Produto,
    MATERIAS_PRIMAS: MateriaPrima,
}


class DocumentStore:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self._em_transacao = False

    # ------------------------- leitura -------------------------
    def listar(self, colecao, ids=None, bloquear=False):
        """Todos os registros da coleção na ordem de inserção.

        ``bloquear`` relê do banco com SELECT ... FOR UPDATE (ignorado no SQLite).
        """
        modelo = self._modelo(colecao)
        stmt = db.select(modelo).order_by(modelo.id)
        if ids is not None:
            stmt = stmt.where(modelo.id.in_(list(ids)))
        if bloquear:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as e:
            raise self._falha(f"Erro ao carregar {colecao}", e) from e

    def obter(self, colecao, registro_id, bloquear=False):
        modelo = self._modelo(colecao)
        try:
            return self.session.get(
                modelo,
                registro_id,
                with_for_update=True if bloquear else None,
                populate_existing=bloquear,
            )
        except SQLAlchemyError as e:
            raise self._falha(f"Erro ao carregar {colecao} #{registro_id}", e) from e

    # ------------------------- escrita -------------------------
    def atualizar(self, colecao, registro_id, campos):
        """Atualização parcial: só os campos informados mudam."""
        modelo = self._modelo(colecao)
        self._checar_campos(modelo, campos)

        obj = self.obter(colecao, registro_id)
        if obj is None:
            raise RegistroNaoEncontrado(f"Registro {registro_id} não encontrado em {colecao}.")

        for campo, valor in campos.items():
            setattr(obj, campo, valor)
        self._gravar(f"Erro ao atualizar {colecao} #{registro_id}")
        return obj

    def criar(self, colecao, dados):
        modelo = self._modelo(colecao)
        self._checar_campos(modelo, dados)

        obj = modelo(**dados)
        self.session.add(obj)
        self._gravar(f"Erro ao criar registro em {colecao}")
        return obj.id

    @contextmanager
    def transacao(self):
        """Tudo ou nada: confirma no final ou desfaz todas as escritas do bloco."""
        if self._em_transacao:
            yield self
            return

        self._em_transacao = True
        try:
            yield self
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise self._falha("Falha ao gravar transação", e) from e
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._em_transacao = False

    # ------------------------- helpers -------------------------
    def _modelo(self, colecao):
        try:
            return COLECOES[colecao]
        except KeyError:
            raise ErroValidacao(f"Coleção desconhecida: {colecao}") from None

    def _checar_campos(self, modelo, campos):
        colunas = set(modelo.__table__.columns.keys()) - {"id"}
        desconhecidos = sorted(set(campos) - colunas)
        if desconhecidos:
            raise ErroValidacao(f"Campos inválidos para {modelo.__tablename__}: {', '.join(desconhecidos)}")

    def _gravar(self, mensagem):
        if self._em_transacao:
            # erros sobem até transacao(), que desfaz o bloco
            self.session.flush()
            return
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise self._falha(mensagem, e) from e
        except Exception:
            self.session.rollback()
            raise

    def _falha(self, mensagem, erro):
        logger.error("%s: %s", mensagem, erro, exc_info=True)
        return ErroPersistencia(mensagem)
