from decimal import Decimal

from conftest import nova_ordem
from pcp import status as st
from pcp.extensions import db
from pcp.models import MateriaPrima, OrdemProducao


def _coluna(body, status):
    return next(c for c in body["columns"] if c["id"] == status)


def _status(ordem_id):
    db.session.expire_all()
    return db.session.get(OrdemProducao, ordem_id).status


def test_quadro_html(client, camiseta):
    produto, _ = camiseta
    nova_ordem(produto, 2, codigo="OP-777")

    r = client.get("/kanban/")
    html = r.get_data(as_text=True)
    assert r.status_code == 200
    assert "Painel Kanban" in html
    assert "OP-777" in html
    for _, titulo in st.COLUNAS:
        assert titulo in html


def test_quadro_vazio(client):
    html = client.get("/kanban/").get_data(as_text=True)
    assert "Nenhuma ordem" in html


def test_dados(client, camiseta):
    produto, _ = camiseta
    nova_ordem(produto, 2, codigo="OP-A")
    nova_ordem(produto, 1, codigo="OP-B", status=st.CONCLUIDA)
    nova_ordem(produto, 1, codigo="OP-X", status="arquivada")

    body = client.get("/kanban/dados").get_json()

    assert [c["id"] for c in body["columns"]] == list(st.STATUS_VALIDOS)
    assert [o["orderId"] for o in _coluna(body, st.PENDENTE)["orders"]] == ["OP-A"]
    assert _coluna(body, st.CONCLUIDA)["count"] == 1
    assert sum(c["count"] for c in body["columns"]) == 2


def test_mover_com_estoque(client, camiseta):
    produto, tecido = camiseta
    ordem = nova_ordem(produto, 2)

    r = client.post("/kanban/mover", json={"ordem_id": ordem.id, "destino": st.EM_PRODUCAO})

    assert r.status_code == 200
    body = r.get_json()
    assert body["moved"] is True
    assert (body["from"], body["to"]) == (st.PENDENTE, st.EM_PRODUCAO)
    assert _coluna(body, st.EM_PRODUCAO)["count"] == 1
    assert _status(ordem.id) == st.EM_PRODUCAO
    assert db.session.get(MateriaPrima, tecido.id).estoque_atual == Decimal("1")


def test_mover_sem_estoque_volta_para_origem(client, camiseta):
    produto, tecido = camiseta
    ordem = nova_ordem(produto, 3)

    r = client.post("/kanban/mover", json={"ordem_id": ordem.id, "destino": st.EM_PRODUCAO})

    assert r.status_code == 409
    body = r.get_json()
    assert body["moved"] is False
    assert body["error"].startswith("Estoque insuficiente: Tecido")
    assert body["faltas"] == [{"materia_prima_id": tecido.id, "necessario": 6.0, "disponivel": 5.0}]
    assert _coluna(body, st.PENDENTE)["count"] == 1
    assert _coluna(body, st.EM_PRODUCAO)["count"] == 0
    assert _status(ordem.id) == st.PENDENTE


def test_mover_para_cartao_de_outra_coluna(client, camiseta):
    produto, _ = camiseta
    ordem = nova_ordem(produto, 1, codigo="OP-001", status=st.EM_PRODUCAO)
    outra = nova_ordem(produto, 1, codigo="OP-002", status=st.CONCLUIDA)

    r = client.post("/kanban/mover", json={"ordem_id": str(ordem.id), "destino": str(outra.id)})

    assert r.status_code == 200
    assert r.get_json()["to"] == st.CONCLUIDA
    assert _status(ordem.id) == st.CONCLUIDA


def test_mover_terminal_e_recusado(client, camiseta):
    produto, _ = camiseta
    ordem = nova_ordem(produto, 1, status=st.CANCELADA)

    r = client.post("/kanban/mover", json={"ordem_id": ordem.id, "destino": st.PENDENTE})

    assert r.status_code == 409
    assert "não pode mudar de status" in r.get_json()["error"]
    assert _status(ordem.id) == st.CANCELADA


def test_mover_destino_invalido(client, camiseta):
    produto, _ = camiseta
    ordem = nova_ordem(produto, 1)

    r = client.post("/kanban/mover", json={"ordem_id": ordem.id, "destino": "lixeira"})

    assert r.status_code == 200
    body = r.get_json()
    assert body["moved"] is False
    assert body["to"] is None
    assert _status(ordem.id) == st.PENDENTE


def test_mover_ordem_inexistente(client):
    r = client.post("/kanban/mover", json={"ordem_id": 999, "destino": st.EM_PRODUCAO})
    assert r.status_code == 404
    assert "error" in r.get_json()


def test_mover_sem_ordem_id(client):
    for payload in ({}, {"ordem_id": "abc"}, {"ordem_id": True}):
        r = client.post("/kanban/mover", json=payload)
        assert r.status_code == 400
        assert r.get_json() == {"error": "Informe ordem_id."}

    r = client.post("/kanban/mover", data="não é json", content_type="text/plain")
    assert r.status_code == 400


def test_quadro_mostra_observacoes(client, camiseta):
    produto, _ = camiseta
    ordem = nova_ordem(produto, 1)
    ordem.observacoes = "bordar logo no peito"
    db.session.commit()

    assert "bordar logo no peito" in client.get("/kanban/").get_data(as_text=True)
    pendentes = _coluna(client.get("/kanban/dados").get_json(), st.PENDENTE)
    assert pendentes["orders"][0]["notes"] == "bordar logo no peito"


def test_mover_pulando_etapa_e_recusado(client, camiseta):
    produto, tecido = camiseta
    pendente = nova_ordem(produto, 1, codigo="OP-001")
    em_producao = nova_ordem(produto, 1, codigo="OP-002", status=st.EM_PRODUCAO)

    r = client.post("/kanban/mover", json={"ordem_id": pendente.id, "destino": st.CONCLUIDA})
    assert r.status_code == 409
    assert _coluna(r.get_json(), st.PENDENTE)["count"] == 1

    r = client.post("/kanban/mover", json={"ordem_id": em_producao.id, "destino": st.PENDENTE})
    assert r.status_code == 409

    assert _status(pendente.id) == st.PENDENTE
    assert _status(em_producao.id) == st.EM_PRODUCAO
    assert db.session.get(MateriaPrima, tecido.id).estoque_atual == Decimal("5")
