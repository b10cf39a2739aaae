from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.datetime_utils import now_local
from .common.http import json_response, register_error_handlers
from .container import Container, build_container
from .core.log_config import configure_logging
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .enrollments.controller import register as register_enrollments
from .invoices.controller import register as register_invoices
from .payments.controller import register as register_payments
from .pricing.controller import register as register_pricing
from .receipts.controller import register as register_receipts
from .registrations.controller import register as register_registrations
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        root = Path(__file__).resolve().parents[3]
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=root / "database" / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=root / "database" / "seed.sql")
            ensure_demo_users(db_config)
            logger.info("Demo seed ready")
        container = build_container(db_config=db_config, settings=settings)

    register_error_handlers(app)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return json_response({"status": "OK", "timestamp": now_local()})

    register_users(app, container)
    register_pricing(app, container)
    register_registrations(app, container)
    register_payments(app, container)
    register_invoices(app, container)
    register_enrollments(app, container)
    register_receipts(app, container)

    return app
