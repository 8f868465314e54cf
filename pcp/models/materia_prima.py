from decimal import Decimal

from pcp.extensions import db

class MateriaPrima(db.Model):
    __tablename__ = "materias_primas"

    id = db.Column(db.Integer, primary_key=True)
    nome = db.Column(db.String(200), nullable=False)
    descricao = db.Column(db.String(255))
    unidade = db.Column(db.String(20), nullable=False, default="un")

    estoque_atual = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    estoque_minimo = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    ativo = db.Column(db.Boolean, default=True)

    usos = db.relationship("MaterialNecessario", back_populates="materia_prima", cascade="all, delete-orphan")

    @property
    def estoque_baixo(self) -> bool:
        return Decimal(str(self.estoque_atual or 0)) <= Decimal(str(self.estoque_minimo or 0))

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.nome,
            "description": self.descricao or "",
            "unit": self.unidade,
            "stockQuantity": float(self.estoque_atual or 0),
            "lowStockThreshold": float(self.estoque_minimo or 0),
            "lowStock": self.estoque_baixo,
            "active": bool(self.ativo),
        }

    def __repr__(self):
        return f"<MateriaPrima {self.nome}>"
