from pcp.extensions import db

class Produto(db.Model):
    __tablename__ = "produtos"

    id = db.Column(db.Integer, primary_key=True)
    nome = db.Column(db.String(200), nullable=False)
    ativo = db.Column(db.Boolean, default=True)

    # ficha técnica (BOM)
    materiais_necessarios = db.relationship(
        "MaterialNecessario",
        back_populates="produto",
        cascade="all, delete-orphan",
        order_by="MaterialNecessario.id",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.nome,
            "active": bool(self.ativo),
            "requiredMaterials": [mn.to_dict() for mn in self.materiais_necessarios],
        }

    def __repr__(self):
        return f"<Produto {self.nome}>"


class MaterialNecessario(db.Model):
    __tablename__ = "materiais_necessarios"

    id = db.Column(db.Integer, primary_key=True)
    produto_id = db.Column(db.Integer, db.ForeignKey("produtos.id"), nullable=False)
    materia_prima_id = db.Column(db.Integer, db.ForeignKey("materias_primas.id"), nullable=False)
    qtd_por_unidade = db.Column(db.Numeric(12, 2), nullable=False)

    produto = db.relationship("Produto", back_populates="materiais_necessarios")
    materia_prima = db.relationship("MateriaPrima", back_populates="usos")

    def to_dict(self):
        return {
            "rawMaterialId": self.materia_prima_id,
            "rawMaterialName": self.materia_prima.nome if self.materia_prima else "",
            "quantityPerUnit": float(self.qtd_por_unidade or 0),
        }

    def __repr__(self):
        return f"<MaterialNecessario {self.produto_id}:{self.materia_prima_id}>"
