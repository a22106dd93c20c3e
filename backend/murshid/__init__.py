"""
Murshid community backend.

Application factory: wires configuration, extensions, logging, error handlers
and the community blueprints.
"""
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import logging
import os

from .utils import cache_manager
from .utils.error_handler import ErrorHandler

from murshid.config import (
    SECRET_KEY, SQLALCHEMY_TRACK_MODIFICATIONS, JWT_SECRET_KEY,
    JWT_TOKEN_LOCATION, JWT_HEADER_NAME, JWT_HEADER_TYPE, JWT_ACCESS_TOKEN_EXPIRES,
    get_database_uri,
    SQLALCHEMY_ECHO,
    REDIS_URL,
    CACHE_TYPE, CACHE_KEY_PREFIX, TAG_CACHE_TTL,
    RATELIMIT_ENABLED, RATELIMIT_STORAGE_URI, REPORT_RATE_LIMIT,
    SCREENING_EXTRA_TERMS,
    CORS_ORIGINS,
    LOG_DIR,
)

# Extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()

# Storage comes from RATELIMIT_STORAGE_URI so tests can switch to memory://
limiter = Limiter(key_func=get_remote_address)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def create_app(config_overrides=None):
    app = Flask(__name__, instance_relative_config=False)
    app.url_map.strict_slashes = False

    app.config.from_mapping(
        SECRET_KEY=SECRET_KEY,
        SQLALCHEMY_TRACK_MODIFICATIONS=SQLALCHEMY_TRACK_MODIFICATIONS,
        SQLALCHEMY_DATABASE_URI=get_database_uri(),
        SQLALCHEMY_ECHO=SQLALCHEMY_ECHO,
        JWT_SECRET_KEY=JWT_SECRET_KEY,
        JWT_TOKEN_LOCATION=JWT_TOKEN_LOCATION,
        JWT_HEADER_NAME=JWT_HEADER_NAME,
        JWT_HEADER_TYPE=JWT_HEADER_TYPE,
        JWT_ACCESS_TOKEN_EXPIRES=JWT_ACCESS_TOKEN_EXPIRES,
        REDIS_URL=REDIS_URL,
        CACHE_TYPE=CACHE_TYPE,
        CACHE_KEY_PREFIX=CACHE_KEY_PREFIX,
        TAG_CACHE_TTL=TAG_CACHE_TTL,
        RATELIMIT_ENABLED=RATELIMIT_ENABLED,
        RATELIMIT_STORAGE_URI=RATELIMIT_STORAGE_URI,
        REPORT_RATE_LIMIT=REPORT_RATE_LIMIT,
        SCREENING_EXTRA_TERMS=SCREENING_EXTRA_TERMS,
        LOG_DIR=LOG_DIR,
        LOG_TO_FILE=True,
    )
    if config_overrides:
        app.config.update(config_overrides)

    # Initialise extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    CORS(app,
         origins=CORS_ORIGINS,
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
         allow_headers=["Content-Type", "Authorization", "Accept-Language"],
         supports_credentials=True)

    cache_manager.init_app(app)

    # --- Configure Flask logging ---
    app.logger.setLevel(logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)
    if not any(getattr(h, '_murshid', False) for h in app.logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler._murshid = True
        app.logger.addHandler(console_handler)
        if app.config.get('LOG_TO_FILE'):
            log_file_path = os.path.join(app.config['LOG_DIR'], 'murshid.log')
            os.makedirs(os.path.dirname(log_file_path), exist_ok=True)
            file_handler = logging.FileHandler(log_file_path)
            file_handler.setFormatter(formatter)
            file_handler._murshid = True
            app.logger.addHandler(file_handler)
    # Module loggers (murshid.services.*, murshid.store) share the app handlers
    package_logger = logging.getLogger('murshid')
    package_logger.setLevel(logging.INFO)
    for handler in app.logger.handlers:
        if handler not in package_logger.handlers:
            package_logger.addHandler(handler)
    package_logger.propagate = False
    # --- End logging configuration ---

    ErrorHandler.register_handlers(app)

    @jwt.invalid_token_loader
    def invalid_token_callback(error_string):
        app.logger.info(f"Rejected invalid token: {error_string}")
        return ErrorHandler.json_error(422)

    @jwt.unauthorized_loader
    def unauthorized_callback(error_string):
        return ErrorHandler.json_error(401)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return ErrorHandler.json_error(401)

    with app.app_context():
        from murshid import models  # noqa: F401  registers tables
        from murshid.routes.posts import posts_bp
        from murshid.routes.answers import answers_bp
        from murshid.routes.comments import comments_bp
        from murshid.routes.reports import reports_bp
        from murshid.routes.moderation import moderation_bp
        from murshid.routes.admin import admin_bp

        app.register_blueprint(posts_bp, url_prefix='/api/community')
        app.register_blueprint(answers_bp, url_prefix='/api/community')
        app.register_blueprint(comments_bp, url_prefix='/api/community')
        app.register_blueprint(reports_bp, url_prefix='/api/community/reports')
        app.register_blueprint(moderation_bp, url_prefix='/api/community')
        app.register_blueprint(admin_bp, url_prefix='/api/admin')

    @app.route('/api/health')
    def health_check():
        return jsonify({'status': 'healthy', 'message': 'Murshid community backend is running'}), 200

    app.logger.info("Flask application created")
    return app
