from .materia_prima import MateriaPrima
from .produto import Produto, MaterialNecessario
from .ordem_producao import OrdemProducao

__all__ = [
    "MateriaPrima", "Produto", "MaterialNecessario", "OrdemProducao",
]
