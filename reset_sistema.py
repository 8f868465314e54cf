"""Reset do sistema + dados de exemplo.

Uso:
  python reset_sistema.py

Apaga e recria as tabelas do banco configurado (DATABASE_URL ou instance/pcp.db) e cadastra:
  matérias-primas Tecido e Linha, produto Camiseta com ficha técnica
  e duas ordens pendentes.
"""

from datetime import date, timedelta
from decimal import Decimal

from pcp import create_app
from pcp.extensions import db
from pcp.models import MateriaPrima, Produto, MaterialNecessario, OrdemProducao

def resetar_banco():
    app = create_app()
    with app.app_context():
        db.drop_all()
        db.create_all()

        tecido = MateriaPrima(nome="Tecido", unidade="m", estoque_atual=Decimal("50"), estoque_minimo=Decimal("10"))
        linha = MateriaPrima(nome="Linha", unidade="un", estoque_atual=Decimal("20"), estoque_minimo=Decimal("5"))
        db.session.add_all([tecido, linha])
        db.session.flush()

        camiseta = Produto(nome="Camiseta", ativo=True)
        camiseta.materiais_necessarios.append(MaterialNecessario(materia_prima_id=tecido.id, qtd_por_unidade=Decimal("2")))
        camiseta.materiais_necessarios.append(MaterialNecessario(materia_prima_id=linha.id, qtd_por_unidade=Decimal("1")))
        db.session.add(camiseta)
        db.session.flush()

        entrega = date.today() + timedelta(days=7)
        db.session.add_all([
            OrdemProducao(codigo="OP-001", produto_id=camiseta.id, quantidade=10, prioridade="normal", data_entrega=entrega),
            OrdemProducao(codigo="OP-002", produto_id=camiseta.id, quantidade=30, prioridade="urgente", data_entrega=entrega),
        ])
        db.session.commit()

        print("OK! Banco recriado.")
        print("OP-001 cabe no estoque; OP-002 precisa de 60 m de Tecido e será recusada.")

if __name__ == "__main__":
    resetar_banco()
