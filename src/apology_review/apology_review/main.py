from __future__ import annotations

import importlib
from pathlib import Path

import structlog
from dotenv import load_dotenv
from flask import Flask, request

from config import get_settings_module

from .apologies.controller import register as register_apologies
from .apologies.repository import ApologyRepository
from .common.logging_setup import bind_request_context, configure_logging
from .container import build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

log = structlog.get_logger(__name__)


def create_app(*, settings_module: str | None = None, repository: ApologyRepository | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(
        environment=getattr(settings, "ENVIRONMENT", "production"),
        level=getattr(settings, "LOG_LEVEL", "INFO"),
    )

    backend = str(getattr(settings, "APOLOGY_BACKEND", "mysql")).lower()
    if repository is None and backend == "mysql":
        db_config = getattr(settings, "DB_CONFIG")
        root = Path(__file__).resolve().parents[3] / "database"
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=root / "schema.sql")
            log.info("schema_ready", tables=len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=root / "seed.sql")
            log.info("demo_seed_ready")

    container = build_container(settings, repository=repository)

    @app.before_request
    def _bind_request_id():
        bind_request_context(request.headers.get("X-Request-ID"), path=request.path)

    register_apologies(app, container)

    log.info("app_started", settings=settings_module, backend=backend)
    return app
