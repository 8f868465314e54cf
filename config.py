import os
import logging

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _database_url():
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        return "sqlite:///pcp.db"
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql+psycopg://", 1)
    return db_url


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # None desliga o arquivo e deixa só o console
    LOG_FILE = os.getenv("LOG_FILE", os.path.join(BASE_DIR, "logs", "pcp.log"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "DEBUG"
    LOG_FILE = None


def logging_config(level, log_file=None):
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": logging.DEBUG,
        },
    }
    if log_file:
        os.makedirs(os.path.dirname(log_file), exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "filename": log_file,
            "maxBytes": 1024 * 1024 * 5,  # 5 MB
            "backupCount": 5,
            "level": logging.INFO,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            "pcp": {
                "handlers": list(handlers),
                "level": level,
                "propagate": False,
            },
        },
    }
