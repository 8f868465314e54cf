from decimal import Decimal

from flask import render_template, request, redirect, url_for, flash, jsonify

from pcp.errors import ErroValidacao, PCPError
from pcp.extensions import db
from pcp.formularios import MAX_DECIMAL, to_decimal, to_int
from pcp.models import MateriaPrima, MaterialNecessario, Produto
from pcp.store import DocumentStore, PRODUTOS

from . import produtos_bp


# ------------------------- helpers -------------------------
def _ficha_do_form(form) -> dict:
    """Linhas da ficha técnica: materia_prima_id[] + qtd_por_unidade[].

    Linhas em branco são ignoradas; a mesma matéria-prima repetida é somada.
    """
    materias_ids = form.getlist("materia_prima_id[]")
    quantidades = form.getlist("qtd_por_unidade[]")

    ficha = {}
    for mat_id, qtd in zip(materias_ids, quantidades):
        if not mat_id or not qtd:
            continue
        qtd_dec = to_decimal(qtd, "0", "Quantidade por unidade")
        if qtd_dec <= 0:
            raise ErroValidacao("Quantidade por unidade deve ser maior que zero.")
        try:
            mat_id = to_int(mat_id, "Matéria-prima")
        except ErroValidacao:
            raise ErroValidacao("Matéria-prima inválida.") from None

        mat = db.session.get(MateriaPrima, mat_id)
        if not mat or not mat.ativo:
            raise ErroValidacao("Matéria-prima inválida.")
        ficha[mat_id] = ficha.get(mat_id, Decimal("0")) + qtd_dec
        if ficha[mat_id] > MAX_DECIMAL:
            raise ErroValidacao(f"Quantidade por unidade acima do limite ({MAX_DECIMAL}).")
    return ficha


def _salvar(produto, nome, ficha):
    store = DocumentStore()
    with store.transacao():
        produto.nome = nome
        produto.materiais_necessarios.clear()
        db.session.flush()
        for mat_id, qtd in ficha.items():
            produto.materiais_necessarios.append(MaterialNecessario(materia_prima_id=mat_id, qtd_por_unidade=qtd))
        db.session.add(produto)


def _form_ctx(produto=None):
    materias = MateriaPrima.query.filter_by(ativo=True).order_by(MateriaPrima.nome.asc()).all()
    return dict(produto=produto, materias=materias)


# ------------------------- produtos -------------------------
@produtos_bp.get("/")
def lista():
    produtos = Produto.query.filter_by(ativo=True).order_by(Produto.nome.asc()).all()
    return render_template("produtos/lista.html", produtos=produtos)


@produtos_bp.get("/dados")
def dados():
    produtos = Produto.query.filter_by(ativo=True).order_by(Produto.nome.asc()).all()
    return jsonify([p.to_dict() for p in produtos])


@produtos_bp.get("/novo")
def novo():
    return render_template("produtos/form.html", **_form_ctx())


@produtos_bp.post("/novo")
def novo_post():
    nome = (request.form.get("nome") or "").strip()
    try:
        if not nome:
            raise ErroValidacao("Informe o nome do produto.")
        _salvar(Produto(ativo=True), nome, _ficha_do_form(request.form))
    except PCPError as e:
        flash(e.mensagem, "warning")
        return redirect(url_for("produtos.novo"))

    flash("Produto cadastrado.", "success")
    return redirect(url_for("produtos.lista"))


@produtos_bp.route("/<int:produto_id>/editar", methods=["GET", "POST"])
def editar(produto_id):
    produto = Produto.query.get_or_404(produto_id)
    if request.method == "GET":
        return render_template("produtos/form.html", **_form_ctx(produto))

    nome = (request.form.get("nome") or "").strip()
    try:
        if not nome:
            raise ErroValidacao("Informe o nome do produto.")
        _salvar(produto, nome, _ficha_do_form(request.form))
    except PCPError as e:
        flash(e.mensagem, "danger")
        return redirect(url_for("produtos.editar", produto_id=produto_id))

    flash("Produto atualizado.", "success")
    return redirect(url_for("produtos.lista"))


@produtos_bp.post("/<int:produto_id>/inativar")
def inativar(produto_id):
    produto = Produto.query.get_or_404(produto_id)
    try:
        DocumentStore().atualizar(PRODUTOS, produto.id, {"ativo": False})
    except PCPError as e:
        flash(e.mensagem, "danger")
        return redirect(url_for("produtos.lista"))

    flash("Produto inativado.", "info")
    return redirect(url_for("produtos.lista"))
