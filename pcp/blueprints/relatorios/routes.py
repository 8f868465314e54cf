from datetime import datetime
from decimal import Decimal
from io import BytesIO

from flask import request, send_file
from sqlalchemy.orm import joinedload

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.lib.units import mm

from openpyxl import Workbook

from pcp import status as st
from pcp.models import MateriaPrima, OrdemProducao

from . import relatorios_bp

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# =========================
# Helpers
# =========================
def _d(v) -> Decimal:
    if v is None:
        return Decimal("0")
    if isinstance(v, Decimal):
        return v
    return Decimal(str(v))


def _data_br(d) -> str:
    return d.strftime("%d/%m/%Y") if d else ""


def _wb_to_bytes(wb: Workbook) -> BytesIO:
    bio = BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio


def _xlsx(wb: Workbook, filename: str):
    return send_file(
        _wb_to_bytes(wb),
        as_attachment=True,
        download_name=filename,
        mimetype=XLSX_MIMETYPE,
    )


def _pdf_table(title: str, headers: list[str], rows: list[list[str]], filename: str):
    bio = BytesIO()
    c = canvas.Canvas(bio, pagesize=A4)
    w, h = A4

    x = 15 * mm
    y = h - 20 * mm

    c.setFont("Helvetica-Bold", 14)
    c.drawString(x, y, title)
    y -= 10 * mm

    c.setFont("Helvetica", 9)
    c.drawString(x, y, f"Gerado em: {datetime.now().strftime('%d/%m/%Y %H:%M')}")
    y -= 8 * mm

    colw = (w - 30 * mm) / max(1, len(headers))

    def cabecalho(y):
        c.setFont("Helvetica-Bold", 9)
        for i, head in enumerate(headers):
            c.drawString(x + i * colw, y, head[:28])
        c.setFont("Helvetica", 9)
        return y - 6 * mm

    y = cabecalho(y)
    for row in rows:
        if y < 20 * mm:
            c.showPage()
            y = cabecalho(h - 20 * mm)

        for i, cell in enumerate(row):
            c.drawString(x + i * colw, y, str(cell)[:28])
        y -= 5 * mm

    c.showPage()
    c.save()
    bio.seek(0)

    return send_file(
        bio,
        as_attachment=True,
        download_name=filename,
        mimetype="application/pdf",
    )


def _materias():
    return MateriaPrima.query.filter_by(ativo=True).order_by(MateriaPrima.nome.asc()).all()


def _ordens():
    status = (request.args.get("status") or "").strip()
    q = OrdemProducao.query.options(joinedload(OrdemProducao.produto))
    if status:
        q = q.filter(OrdemProducao.status == status)
    return q.order_by(OrdemProducao.data_entrega.asc(), OrdemProducao.id.asc()).all()


# =========================
# 1) ESTOQUE DE MATÉRIA-PRIMA
# =========================
@relatorios_bp.get("/estoque.xlsx")
def relatorio_estoque_xlsx():
    wb = Workbook()
    ws = wb.active
    ws.title = "Matérias-primas"
    ws.append(["Matéria-prima", "Unidade", "Estoque", "Mínimo", "Estoque baixo"])

    for m in _materias():
        ws.append([
            m.nome,
            m.unidade,
            float(_d(m.estoque_atual)),
            float(_d(m.estoque_minimo)),
            "SIM" if m.estoque_baixo else "",
        ])

    return _xlsx(wb, "relatorio_estoque.xlsx")


@relatorios_bp.get("/estoque.pdf")
def relatorio_estoque_pdf():
    headers = ["Matéria-prima", "Un", "Estoque", "Mínimo", "Baixo"]
    rows = [
        [m.nome, m.unidade, str(_d(m.estoque_atual)), str(_d(m.estoque_minimo)), "SIM" if m.estoque_baixo else ""]
        for m in _materias()
    ]
    return _pdf_table("Estoque de Matéria-prima", headers, rows, "relatorio_estoque.pdf")


# =========================
# 2) ORDENS DE PRODUÇÃO
# =========================
@relatorios_bp.get("/ordens.xlsx")
def relatorio_ordens_xlsx():
    wb = Workbook()
    ws = wb.active
    ws.title = "Ordens de Produção"
    ws.append(["Ordem", "Produto", "Quantidade", "Prioridade", "Status", "Criada em", "Entrega", "Observações"])

    for o in _ordens():
        ws.append([
            o.codigo,
            o.produto_nome,
            o.quantidade,
            o.prioridade,
            st.titulo(o.status),
            _data_br(o.data),
            _data_br(o.data_entrega),
            o.observacoes or "",
        ])

    return _xlsx(wb, "relatorio_ordens.xlsx")


@relatorios_bp.get("/ordens.pdf")
def relatorio_ordens_pdf():
    headers = ["Ordem", "Produto", "Qtd", "Prioridade", "Status", "Entrega"]
    rows = [
        [o.codigo, o.produto_nome, str(o.quantidade), o.prioridade, st.titulo(o.status), _data_br(o.data_entrega)]
        for o in _ordens()
    ]
    return _pdf_table("Ordens de Produção", headers, rows, "relatorio_ordens.pdf")
