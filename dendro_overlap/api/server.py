"""Flask application factory."""
from __future__ import annotations

import logging
import logging.handlers
import os
import time
from pathlib import Path
from typing import Optional

from flask import Flask
from flask_cors import CORS

from dendro_overlap.api.routes.core import core_bp
from dendro_overlap.api.routes.dendrogram import dendrogram_bp
from dendro_overlap.api.routes.overlap import overlap_bp
from dendro_overlap.api.state import ViewState
from dendro_overlap.data.loader import DatasetLoader

logger = logging.getLogger(__name__)


def create_app(config_overrides: Optional[dict] = None) -> Flask:
    """Initialize and configure the Flask application.

    Tests pass ``VIEW_STATE`` / ``DATASET_LOADER`` overrides to inject state
    and ``LOAD_ON_STARTUP=False`` to skip the initial fetch.
    """
    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes by default

    # 1. Configuration
    app.config["STARTUP_TIME"] = time.time()
    app.config["LOAD_ON_STARTUP"] = True
    if config_overrides:
        app.config.update(config_overrides)

    _configure_logging()

    # 2. Services
    state: ViewState = app.config.setdefault("VIEW_STATE", ViewState())
    if app.config.get("DATASET_LOADER") is None:
        app.config["DATASET_LOADER"] = DatasetLoader()

    # 2b. Initial load. A broken tree leaves the app up and every view answers 503.
    if app.config["LOAD_ON_STARTUP"]:
        try:
            state.load_with(app.config["DATASET_LOADER"].load)
        except Exception as exc:
            logger.warning("Initial dataset load failed: %s", exc)

    # 3. Register Blueprints
    app.register_blueprint(core_bp)
    app.register_blueprint(dendrogram_bp)
    app.register_blueprint(overlap_bp)

    logger.info("Dendrogram overlap API initialized")
    return app


def _configure_logging(log_dir: Path = Path("logs")) -> None:
    """Attach a rotating file handler for API diagnostics."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "api.log"

    log_level_name = os.getenv("API_LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)

    root = logging.getLogger()

    # Avoid adding duplicate handlers if re-initializing
    already_configured = any(
        isinstance(h, logging.handlers.RotatingFileHandler)
        and getattr(h, "baseFilename", "") == str(log_path.resolve())
        for h in root.handlers
    )
    if already_configured:
        return

    root.setLevel(log_level)

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=5 * 1024 * 1024, backupCount=5
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
        )
    )
    root.addHandler(file_handler)


if __name__ == "__main__":
    # Dev server entry point
    app = create_app()
    port = int(os.getenv("PORT", 8000))
    app.run(host="0.0.0.0", port=port, debug=True)
