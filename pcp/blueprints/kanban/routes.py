import logging

from flask import render_template, request, jsonify, flash

from pcp import motor
from pcp import status as st
from pcp.errors import PCPError
from pcp.kanban import QuadroKanban
from pcp.store import DocumentStore, ORDENS

from . import kanban_bp

logger = logging.getLogger(__name__)


def _quadro(store: DocumentStore) -> QuadroKanban:
    quadro = QuadroKanban(persistir=lambda ordem_id, destino: motor.aplicar_transicao(store, ordem_id, destino))
    quadro.carregar(store.listar(ORDENS))
    return quadro


def _alvo(v):
    # coluna ("pendente") ou id de outro cartão
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        v = v.strip()
        return int(v) if v.isdigit() else v
    return None


def bad_request(msg: str):
    return jsonify({"error": msg}), 400


@kanban_bp.errorhandler(PCPError)
def _erro_api(e):
    return jsonify(e.to_dict()), e.status_code


@kanban_bp.get("/")
def quadro():
    try:
        colunas = _quadro(DocumentStore()).to_dict()["columns"]
    except PCPError as e:
        flash("Erro ao carregar ordens de produção", "danger")
        logger.error("Quadro não carregou: %s", e)
        colunas = [{"id": s, "title": t, "count": 0, "orders": []} for s, t in st.COLUNAS]
    return render_template("kanban/quadro.html", colunas=colunas)


@kanban_bp.get("/dados")
def dados():
    return jsonify(_quadro(DocumentStore()).to_dict())


@kanban_bp.post("/mover")
def mover():
    payload = request.get_json(silent=True) or {}
    ordem_id = _alvo(payload.get("ordem_id"))
    if not isinstance(ordem_id, int):
        return bad_request("Informe ordem_id.")
    destino = _alvo(payload.get("destino"))

    store = DocumentStore()
    quadro = _quadro(store)
    quadro.iniciar_arraste(ordem_id)
    resultado = quadro.soltar(destino)

    body = {
        "moved": resultado.movido,
        "orderId": resultado.ordem_id,
        "from": resultado.origem,
        "to": resultado.destino,
        "message": resultado.mensagem,
    }
    body.update(quadro.to_dict())
    if resultado.erro is not None:
        body.update(resultado.erro.to_dict())
        return jsonify(body), resultado.erro.status_code
    return jsonify(body)
