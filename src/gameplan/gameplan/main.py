from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .web import register_error_handlers
from .logging_config import get_logger, setup_logging
from .progress.controller import register as register_progress
from .users.controller import register as register_users

logger = get_logger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), json_format=bool(getattr(settings, "LOG_JSON", False)))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            target = DBConfig.from_dict(db_config)
            apply_schema(target, schema_path=schema_path)
            logger.info("Schema ready (tables=%s)", len(list_tables(target)))

        container = build_container(
            db_config=db_config,
            progress_store_dir=getattr(settings, "PROGRESS_STORE_DIR", "instance/progress"),
            default_fence=getattr(settings, "DEFAULT_FENCE", None),
            mail=getattr(settings, "MAIL_CONFIG", None),
        )

    app.extensions["gameplan"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_progress(app, container)

    return app
