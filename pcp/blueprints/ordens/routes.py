from datetime import datetime
import logging

from flask import render_template, request, redirect, url_for, flash

from pcp import motor
from pcp import status as st
from pcp.errors import ErroValidacao, PCPError
from pcp.extensions import db
from pcp.formularios import to_int
from pcp.models import OrdemProducao, Produto
from pcp.store import DocumentStore, ORDENS

from . import ordens_bp

logger = logging.getLogger(__name__)

# depois de sair de "pendente" o consumo de matéria-prima já foi baixado
CAMPOS_TRAVADOS = ("codigo", "produto_id", "quantidade")


# ------------------------- helpers -------------------------
def _parse_date(s: str | None):
    if not s:
        return None
    try:
        return datetime.strptime(s.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def _dados_do_form(form) -> dict:
    codigo = (form.get("codigo") or "").strip()
    prioridade = (form.get("prioridade") or "normal").strip()
    data_entrega = _parse_date(form.get("data_entrega"))
    observacoes = (form.get("observacoes") or "").strip()

    if not codigo:
        raise ErroValidacao("Informe o ID da ordem (ex.: OP-001).")

    try:
        produto_id = to_int(form.get("produto_id"), "Produto")
    except ErroValidacao:
        raise ErroValidacao("Selecione o produto.") from None
    if db.session.get(Produto, produto_id) is None:
        raise ErroValidacao("Produto inválido.")

    quantidade = to_int(form.get("quantidade"), "Quantidade")
    if quantidade <= 0:
        raise ErroValidacao("Quantidade deve ser maior que zero.")

    if prioridade not in st.PRIORIDADES:
        raise ErroValidacao(f"Prioridade inválida: {prioridade}.")
    if data_entrega is None:
        raise ErroValidacao("Informe a data de entrega (AAAA-MM-DD).")

    return {
        "codigo": codigo,
        "produto_id": produto_id,
        "quantidade": quantidade,
        "prioridade": prioridade,
        "data_entrega": data_entrega,
        "observacoes": observacoes or None,
    }


def _form_ctx(ordem=None):
    produtos = Produto.query.filter_by(ativo=True).order_by(Produto.nome.asc()).all()
    return dict(
        ordem=ordem,
        produtos=produtos,
        prioridades=st.PRIORIDADES,
        colunas=st.COLUNAS,
        campos_travados=CAMPOS_TRAVADOS if ordem is not None and ordem.status != st.PENDENTE else (),
    )


# ------------------------- lista -------------------------
@ordens_bp.get("/")
def lista():
    status = (request.args.get("status") or "").strip()
    q = OrdemProducao.query
    if status:
        q = q.filter_by(status=status)
    ordens = q.order_by(OrdemProducao.id.desc()).all()
    return render_template(
        "ordens/lista.html",
        ordens=ordens,
        status=status,
        colunas=st.COLUNAS,
        proximo=st.PROXIMO,
        terminais=st.TERMINAIS,
    )


# ------------------------- nova -------------------------
@ordens_bp.get("/nova")
def nova():
    return render_template("ordens/form.html", **_form_ctx())


@ordens_bp.post("/nova")
def nova_post():
    status = (request.form.get("status") or st.PENDENTE).strip()
    try:
        dados = _dados_do_form(request.form)
        if status != st.PENDENTE:
            raise ErroValidacao("Novas ordens começam como Pendente; avance pelo botão ou pelo quadro.")
        ordem_id = DocumentStore().criar(ORDENS, dict(dados, status=st.PENDENTE))
    except PCPError as e:
        flash(e.mensagem, "warning")
        return redirect(url_for("ordens.nova"))

    logger.info("Ordem %s criada (#%s)", dados["codigo"], ordem_id)
    flash("Ordem de produção criada com sucesso!", "success")
    return redirect(url_for("ordens.lista"))


# ------------------------- editar -------------------------
@ordens_bp.route("/<int:ordem_id>/editar", methods=["GET", "POST"])
def editar(ordem_id):
    ordem = OrdemProducao.query.get_or_404(ordem_id)
    if request.method == "GET":
        return render_template("ordens/form.html", **_form_ctx(ordem))

    novo_status = (request.form.get("status") or ordem.status or "").strip()
    store = DocumentStore()
    try:
        dados = _dados_do_form(request.form)
        if ordem.status != st.PENDENTE:
            alterados = [c for c in CAMPOS_TRAVADOS if dados[c] != getattr(ordem, c)]
            if alterados:
                raise ErroValidacao(
                    f"Ordem {st.titulo(ordem.status)}: não é possível alterar {', '.join(alterados)}."
                )

        with store.transacao():
            store.atualizar(ORDENS, ordem_id, dados)
            # status só muda pelo motor, na mesma transação
            if novo_status != ordem.status:
                motor.aplicar_transicao(store, ordem_id, novo_status)
    except PCPError as e:
        flash(e.mensagem, "danger")
        return redirect(url_for("ordens.editar", ordem_id=ordem_id))

    flash("Ordem atualizada.", "success")
    return redirect(url_for("ordens.lista"))


# ------------------------- status -------------------------
@ordens_bp.post("/<int:ordem_id>/avancar")
def avancar(ordem_id):
    ordem = OrdemProducao.query.get_or_404(ordem_id)
    codigo = ordem.codigo
    try:
        decisao = motor.avancar(DocumentStore(), ordem_id)
    except PCPError as e:
        flash(e.mensagem, "danger")
        return redirect(url_for("ordens.lista"))

    flash(f"Ordem {codigo} movida para {st.titulo(decisao.novo_status)}.", "success")
    return redirect(url_for("ordens.lista"))


@ordens_bp.post("/<int:ordem_id>/cancelar")
def cancelar(ordem_id):
    ordem = OrdemProducao.query.get_or_404(ordem_id)
    codigo = ordem.codigo
    try:
        motor.cancelar(DocumentStore(), ordem_id)
    except PCPError as e:
        flash(e.mensagem, "danger")
        return redirect(url_for("ordens.lista"))

    flash(f"Ordem {codigo} cancelada.", "info")
    return redirect(url_for("ordens.lista"))
