# mcbuildlib/__init__.py
import os
from flask import Flask, jsonify
from dotenv import load_dotenv
from flask_cors import CORS
from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException


def create_app(overrides=None):
    load_dotenv()
    app = Flask(__name__)

    # ---- Config ----
    app.config["DATABASE_URL"] = os.environ.get("DATABASE_URL")
    app.config["JWT_SECRET"] = os.environ.get("JWT_SECRET", "dev-secret-change-me")
    app.config["JWT_EXPIRES_HOURS"] = int(os.environ.get("JWT_EXPIRES_HOURS", "24"))
    app.config["CORS_ORIGINS"] = os.environ.get("CORS_ORIGINS", "*")
    app.config["ADMIN_USERNAME"] = os.environ.get("ADMIN_USERNAME")
    app.config["ADMIN_PASSWORD"] = os.environ.get("ADMIN_PASSWORD")
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO")
    app.config["BULK_MAX_ENTRIES"] = int(os.environ.get("BULK_MAX_ENTRIES", "1000"))
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"].upper())

    from mcbuildlib.db.engine import make_engine, init_db
    engine = make_engine(app.config["DATABASE_URL"])
    init_db(engine)
    app.config["DB_ENGINE"] = engine

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    # ---- Visit counter ----
    from mcbuildlib.services.visits import VisitCounter
    from mcbuildlib.routes.visits import count_visit
    app.extensions["visit_counter"] = VisitCounter()
    app.before_request(count_visit)

    _register_error_handlers(app)

    # ---- Blueprints ----
    from mcbuildlib.routes.auth import auth_bp
    from mcbuildlib.routes.catalog import authors_bp, themes_bp, colors_bp
    from mcbuildlib.routes.builds import builds_bp
    from mcbuildlib.routes.bulk import bulk_bp
    from mcbuildlib.routes.visits import visits_bp

    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(authors_bp, url_prefix="/api")
    app.register_blueprint(themes_bp, url_prefix="/api")
    app.register_blueprint(colors_bp, url_prefix="/api")
    app.register_blueprint(builds_bp, url_prefix="/api")
    app.register_blueprint(bulk_bp, url_prefix="/api")
    app.register_blueprint(visits_bp, url_prefix="/api")

    # ---- Admin account ----
    from mcbuildlib.services.seed_admin import seed_admin
    seed_admin(engine, app.config["ADMIN_USERNAME"], app.config["ADMIN_PASSWORD"])

    return app


def _register_error_handlers(app):
    from mcbuildlib.services.errors import CatalogError

    @app.errorhandler(CatalogError)
    def _catalog_error(err):
        return jsonify(err.to_dict()), err.status

    @app.errorhandler(IntegrityError)
    def _integrity_error(err):
        current_app.logger.warning("integrity error: %s", err.orig)
        return jsonify({"error": "conflict", "message": "Resource already exists or is still referenced"}), 409

    @app.errorhandler(HTTPException)
    def _http_error(err):
        return jsonify({"error": err.name.lower().replace(" ", "_"), "message": err.description}), err.code

    @app.errorhandler(Exception)
    def _server_error(err):
        current_app.logger.exception("unhandled error")
        return jsonify({"error": "server_error"}), 500


def get_conn():
    engine = current_app.config["DB_ENGINE"]
    conn = engine.connect()

    if conn.in_transaction():
        conn.rollback()

    return conn
