from flask import Blueprint

estoque_bp = Blueprint("estoque", __name__, url_prefix="/materias-primas")

from . import routes  # noqa: E402,F401
