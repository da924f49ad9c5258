import logging
import os
import time
from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from app.models import db, init_engine
from app.routes import register_routes
from app.services.room_provider import DailyRoomProvider

load_dotenv()

logger = logging.getLogger(__name__)


def _load_config():
    DATABASE_URL = os.getenv("DATABASE_URL") or \
        "postgresql://vs:vs@db:5432/visually_speaking"

    if DATABASE_URL.startswith("postgres://"):
        DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

    return dict(
        SQLALCHEMY_DATABASE_URI=DATABASE_URL,
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        SQLALCHEMY_ECHO=False,
        CORS_ORIGINS=os.getenv("ALLOWED_ORIGINS", "*"),
        DAILY_API_KEY=os.getenv("DAILY_API_KEY", ""),
        DAILY_API_URL=os.getenv("DAILY_API_URL", "https://api.daily.co/v1"),
        DAILY_ROOM_TTL_SEC=int(os.getenv("DAILY_ROOM_TTL_SEC", "7200")),
        DAILY_TIMEOUT_SEC=float(os.getenv("DAILY_TIMEOUT_SEC", "10")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


def _cors_origins(value):
    if value.strip() == "*":
        return "*"
    return [o.strip() for o in value.split(",") if o.strip()]


def _register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"success": False, "error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({"success": False, "error": "Internal server error"}), 500


def create_app(overrides=None):
    app = Flask(__name__)

    # ================= CONFIG =================
    app.config.update(_load_config())
    if overrides:
        app.config.update(overrides)

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite"):
        options = app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {})
        options.setdefault("connect_args", {"timeout": 30, "check_same_thread": False})

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    CORS(app, resources={r"/api/*": {"origins": _cors_origins(app.config["CORS_ORIGINS"])}})

    # ================= INIT =================
    db.init_app(app)
    init_engine(app)
    app.extensions["room_provider"] = DailyRoomProvider.from_config(app.config)
    register_routes(app)
    _register_error_handlers(app)

    return app


def init_db(app):
    with app.app_context():
        max_retries = 10
        for i in range(max_retries):
            try:
                db.create_all()
                logger.info("Database ready")
                return
            except OperationalError:
                logger.warning(f"DB not ready ({i+1}/{max_retries})")
                time.sleep(2)
        raise RuntimeError("Database not reachable")


if __name__ == "__main__":
    app = create_app()
    logger.info("Matchmaking API starting on port 5000...")
    init_db(app)
    app.run(host="0.0.0.0", port=5000, debug=os.getenv("FLASK_DEBUG") == "1", use_reloader=False)
