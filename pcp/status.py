"""Status e prioridades das ordens de produção."""

PENDENTE = "pendente"
EM_PRODUCAO = "em_producao"
CONCLUIDA = "concluida"
CANCELADA = "cancelada"

# ordem das colunas no quadro
COLUNAS = (
    (PENDENTE, "Pendente"),
    (EM_PRODUCAO, "Em Produção"),
    (CONCLUIDA, "Concluída"),
    (CANCELADA, "Cancelada"),
)

STATUS_VALIDOS = tuple(s for s, _ in COLUNAS)
TERMINAIS = (CONCLUIDA, CANCELADA)

TRANSICOES = {
    PENDENTE: (EM_PRODUCAO, CANCELADA),
    EM_PRODUCAO: (CONCLUIDA, CANCELADA),
    CONCLUIDA: (),
    CANCELADA: (),
}

# transições que consomem matéria-prima
COM_BAIXA_ESTOQUE = {(PENDENTE, EM_PRODUCAO)}

# botão "avançar": Iniciar Produção / Finalizar
PROXIMO = {
    PENDENTE: EM_PRODUCAO,
    EM_PRODUCAO: CONCLUIDA,
}

PRIORIDADES = ("baixa", "normal", "alta", "urgente")


def titulo(status):
    return dict(COLUNAS).get(status, status or "")


def permitida(origem, destino):
    return destino in TRANSICOES.get(origem, ())


def exige_estoque(origem, destino):
    return (origem, destino) in COM_BAIXA_ESTOQUE
