class PCPError(Exception):
    status_code = 400

    def __init__(self, mensagem):
        super().__init__(mensagem)
        self.mensagem = mensagem

    def to_dict(self):
        return {"error": self.mensagem}


class ErroValidacao(PCPError):
    """Campo obrigatório ausente ou valor inválido."""


class TransicaoInvalida(ErroValidacao):
    status_code = 409


class EstoqueInsuficiente(ErroValidacao):
    status_code = 409

    def __init__(self, mensagem, faltas=None):
        super().__init__(mensagem)
        # [(materia_prima_id, necessario, disponivel)]
        self.faltas = list(faltas or [])

    def to_dict(self):
        payload = super().to_dict()
        payload["faltas"] = [
            {"materia_prima_id": mid, "necessario": float(nec), "disponivel": float(disp)}
            for mid, nec, disp in self.faltas
        ]
        return payload


class RegistroNaoEncontrado(PCPError):
    status_code = 404


class ErroPersistencia(PCPError):
    status_code = 503
