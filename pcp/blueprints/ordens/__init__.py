from flask import Blueprint

ordens_bp = Blueprint("ordens", __name__, url_prefix="/ordens")

from . import routes  # noqa: E402,F401
