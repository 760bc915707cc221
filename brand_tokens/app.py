# brand_tokens/app.py
import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

from .errors import TokenError
from .models import db


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


def create_app(test_config=None):
    """Application factory: configure Flask, the database, JWT and the API blueprints."""
    app = Flask(__name__)
    CORS(app)

    basedir = os.path.abspath(os.path.dirname(__file__))
    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv(
        "DATABASE_URL", 'sqlite:///' + os.path.join(basedir, 'brand_tokens.db'))
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "dev-only-override-change-this-secret-key")
    app.config["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO").upper()
    app.config["TOKENS_DEFAULT_PAGE_SIZE"] = _int_env("TOKENS_DEFAULT_PAGE_SIZE", 20)
    app.config["TOKENS_MAX_PAGE_SIZE"] = _int_env("TOKENS_MAX_PAGE_SIZE", 100)
    if test_config:
        app.config.update(test_config)

    level = getattr(logging, str(app.config["LOG_LEVEL"]), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(level)
    logging.getLogger("brand_tokens").setLevel(level)

    db.init_app(app)
    JWTManager(app)

    @app.errorhandler(TokenError)
    def handle_token_error(exc: TokenError):
        if exc.status_code >= 500:
            app.logger.error("%s: %s", type(exc).__name__, exc.message)
        body = {"ok": False}
        body.update(exc.to_dict())
        return jsonify(body), exc.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"ok": False, "message": exc.description}), exc.code
        app.logger.exception("Unhandled error: %s", exc)
        return jsonify({"ok": False, "message": "Internal server error"}), 500

    from .routes.auth_routes import bp as auth_bp
    from .routes.token_routes import bp as token_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(token_bp)

    return app
