import logging

from flask import render_template, request, redirect, url_for, flash, jsonify

from sqlalchemy import or_

from pcp.errors import ErroValidacao, PCPError
from pcp.formularios import to_decimal
from pcp.models import MateriaPrima
from pcp.store import DocumentStore, MATERIAS_PRIMAS

from . import estoque_bp

logger = logging.getLogger(__name__)


# ------------------------- helpers -------------------------
def _dados_do_form(form, estoque_padrao="0") -> dict:
    nome = (form.get("nome") or "").strip()
    descricao = (form.get("descricao") or "").strip()
    unidade = (form.get("unidade") or "").strip()
    estoque_atual = to_decimal(form.get("estoque_atual") or estoque_padrao, estoque_padrao, "Estoque")
    estoque_minimo = to_decimal(form.get("estoque_minimo") or "0", "0", "Limite mínimo")

    if not nome or not unidade:
        raise ErroValidacao("Nome e Unidade são obrigatórios.")
    if estoque_atual < 0 or estoque_minimo < 0:
        raise ErroValidacao("Estoque e limite mínimo não podem ser negativos.")

    return {
        "nome": nome,
        "descricao": descricao or None,
        "unidade": unidade,
        "estoque_atual": estoque_atual,
        "estoque_minimo": estoque_minimo,
    }


# ------------------------- matérias-primas -------------------------
@estoque_bp.get("/")
def materias_primas():
    q = (request.args.get("q") or "").strip()
    base_q = MateriaPrima.query.filter_by(ativo=True)
    if q:
        like = f"%{q}%"
        base_q = base_q.filter(or_(MateriaPrima.nome.ilike(like), MateriaPrima.descricao.ilike(like)))
    materias = base_q.order_by(MateriaPrima.nome.asc()).all()
    return render_template("estoque/materias_primas.html", materias=materias, q=q)


@estoque_bp.get("/dados")
def materias_primas_dados():
    materias = MateriaPrima.query.filter_by(ativo=True).order_by(MateriaPrima.nome.asc()).all()
    return jsonify([m.to_dict() for m in materias])


@estoque_bp.get("/nova")
def materia_prima_nova():
    return render_template("estoque/materia_prima_form.html", mat=None)


@estoque_bp.post("/nova")
def materia_prima_nova_post():
    store = DocumentStore()
    try:
        dados = _dados_do_form(request.form)

        existente = MateriaPrima.query.filter_by(nome=dados["nome"], unidade=dados["unidade"]).first()
        if existente:
            store.atualizar(MATERIAS_PRIMAS, existente.id, dict(dados, ativo=True))
            flash("Matéria-prima já existia. Reativada/atualizada.", "info")
            return redirect(url_for("estoque.materias_primas"))

        store.criar(MATERIAS_PRIMAS, dict(dados, ativo=True))
    except PCPError as e:
        flash(e.mensagem, "warning")
        return redirect(url_for("estoque.materia_prima_nova"))

    flash("Matéria-prima cadastrada com sucesso!", "success")
    return redirect(url_for("estoque.materias_primas"))


@estoque_bp.route("/<int:materia_prima_id>/editar", methods=["GET", "POST"])
def materia_prima_editar(materia_prima_id):
    mat = MateriaPrima.query.get_or_404(materia_prima_id)
    if request.method == "GET":
        return render_template("estoque/materia_prima_form.html", mat=mat)

    try:
        dados = _dados_do_form(request.form, estoque_padrao=str(mat.estoque_atual or 0))

        outra = MateriaPrima.query.filter(
            MateriaPrima.nome == dados["nome"],
            MateriaPrima.unidade == dados["unidade"],
            MateriaPrima.id != mat.id,
        ).first()
        if outra:
            raise ErroValidacao("Já existe outra matéria-prima com esse nome e unidade.")

        DocumentStore().atualizar(MATERIAS_PRIMAS, mat.id, dados)
    except PCPError as e:
        flash(e.mensagem, "danger")
        return redirect(url_for("estoque.materia_prima_editar", materia_prima_id=materia_prima_id))

    logger.info("Matéria-prima %s atualizada (estoque %s)", dados["nome"], dados["estoque_atual"])
    flash("Matéria-prima atualizada com sucesso!", "success")
    return redirect(url_for("estoque.materias_primas"))


@estoque_bp.post("/<int:materia_prima_id>/inativar")
def materia_prima_inativar(materia_prima_id):
    mat = MateriaPrima.query.get_or_404(materia_prima_id)
    try:
        DocumentStore().atualizar(MATERIAS_PRIMAS, mat.id, {"ativo": False})
    except PCPError as e:
        flash(e.mensagem, "danger")
        return redirect(url_for("estoque.materias_primas"))

    flash("Matéria-prima inativada.", "info")
    return redirect(url_for("estoque.materias_primas"))
