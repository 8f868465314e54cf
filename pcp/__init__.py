import logging.config

from flask import Flask, redirect, url_for

from .extensions import db
from config import Config, logging_config


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.config.dictConfig(
        logging_config(app.config["LOG_LEVEL"], app.config.get("LOG_FILE"))
    )
    logger = logging.getLogger(__name__)

    db.init_app(app)

    # Blueprints
    from pcp.blueprints.ordens import ordens_bp
    from pcp.blueprints.kanban import kanban_bp
    from pcp.blueprints.estoque import estoque_bp
    from pcp.blueprints.produtos import produtos_bp
    from pcp.blueprints.relatorios import relatorios_bp

    app.register_blueprint(ordens_bp)
    app.register_blueprint(kanban_bp)
    app.register_blueprint(estoque_bp)
    app.register_blueprint(produtos_bp)
    app.register_blueprint(relatorios_bp)

    @app.get("/")
    def index():
        return redirect(url_for("kanban.quadro"))

    # cria tabelas
    with app.app_context():
        from pcp import models  # noqa: F401
        db.create_all()
        logger.info("Banco pronto: %s", db.engine.url.render_as_string(hide_password=True))

    return app
