import json
import os
import logging
from flask import Flask
from flask_cors import CORS
from series_tracker.repo import SqliteRepo
from series_tracker.service import SeriesService
from series_tracker.web import register_routes, register_error_handlers

DEFAULT_CFG = {
    "database": "data/series.db",
    "db_timeout": 5.0,
    "frontend_url": "http://localhost",
    "debug": False,
    "host": "0.0.0.0",
    "port": 8080,
    "logging_level": "INFO"
}

# fixed testing-tool origin, allowed alongside the configured frontend
TESTING_ORIGIN = "https://hoppscotch.io"

logger = logging.getLogger(__name__)

def database_path(url: str) -> str:
    """Accept either 'sqlite://path' or a bare filesystem path."""
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            return url[len(prefix):]
    return url

def load_config(path="config.json"):
    merged = DEFAULT_CFG.copy()
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                merged.update(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning("Failed to read %s: %s - using defaults", path, e)
    if os.environ.get("DATABASE_URL"):
        merged["database"] = database_path(os.environ["DATABASE_URL"])
    if os.environ.get("FRONTEND_URL"):
        merged["frontend_url"] = os.environ["FRONTEND_URL"]
    if os.environ.get("LOG_LEVEL"):
        merged["logging_level"] = os.environ["LOG_LEVEL"]
    return merged

cfg = load_config()

def configure_logging(level_name: str, debug: bool = False):
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # quieter werkzeug when not debugging
    logging.getLogger("werkzeug").setLevel(logging.INFO if debug else logging.WARNING)

def create_app(overrides=None):
    conf = dict(cfg, **(overrides or {}))
    configure_logging(conf.get("logging_level", "INFO"), conf.get("debug", False))
    logger.info("Starting app with config: %s", {k: v for k, v in conf.items() if k != "database"})

    app = Flask(__name__)
    CORS(
        app,
        resources={r"/api/*": {"origins": [conf["frontend_url"], TESTING_ORIGIN]}},
        methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["Content-Type"],
        max_age=3600,
    )
    repo = SqliteRepo(conf["database"], timeout=float(conf.get("db_timeout", 5.0)))
    repo.ensure_schema()
    service = SeriesService(repo)
    app.config["SERVICE"] = service

    register_routes(app, service)
    register_error_handlers(app)
    return app

if __name__ == "__main__":
    app = create_app()
    app.run(host=cfg.get("host", "0.0.0.0"), port=cfg.get("port", 8080), debug=cfg.get("debug", False))
