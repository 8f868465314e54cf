from datetime import date, datetime

from pcp.extensions import db
from pcp.status import PENDENTE

class OrdemProducao(db.Model):
    __tablename__ = "ordens_producao"

    id = db.Column(db.Integer, primary_key=True)
    codigo = db.Column(db.String(30), nullable=False)  # ex.: OP-001, não é único
    produto_id = db.Column(db.Integer, db.ForeignKey("produtos.id"))
    quantidade = db.Column(db.Integer, nullable=False)
    prioridade = db.Column(db.String(20), default="normal")  # baixa | normal | alta | urgente
    status = db.Column(db.String(20), default=PENDENTE)  # pendente | em_producao | concluida | cancelada

    data = db.Column(db.Date, default=date.today)
    data_entrega = db.Column(db.Date)
    observacoes = db.Column(db.Text)

    atualizado_em = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    produto = db.relationship("Produto")

    @property
    def produto_nome(self) -> str:
        # referência pendente aparece em branco
        return self.produto.nome if self.produto else ""

    def to_dict(self):
        return {
            "id": self.id,
            "orderId": self.codigo,
            "productId": self.produto_id,
            "productName": self.produto_nome,
            "quantity": self.quantidade,
            "priority": self.prioridade,
            "status": self.status,
            "dueDate": self.data_entrega.isoformat() if self.data_entrega else "",
            "date": self.data.isoformat() if self.data else "",
            "notes": self.observacoes or "",
        }

    def __repr__(self):
        return f"<OrdemProducao {self.codigo} {self.status}>"
