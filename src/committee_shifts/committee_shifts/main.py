from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .notifications.controller import register as register_notifications
from .notifications.scheduler import schedule_reminders
from .reports.controller import register as register_reports
from .slots.controller import register as register_slots

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["VAPID_PUBLIC_KEY"] = getattr(settings, "VAPID_PUBLIC_KEY", "")

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            logger.info("demo seed ready")

        container = build_container(db_config=db_config, settings=settings)

    app.extensions["committee_shifts.container"] = container

    register_attendance(app, container)
    register_slots(app, container)
    register_reports(app, container)
    register_notifications(app, container)

    if bool(getattr(settings, "START_NOTIFIER", False)):
        scheduler = schedule_reminders(
            container.matcher,
            purge_seconds=int(getattr(settings, "DEDUP_TTL_SECONDS", 3600)),
        )
        scheduler.start()
        app.extensions["committee_shifts.scheduler"] = scheduler
        logger.info("in-process reminder scheduler started")

    return app
