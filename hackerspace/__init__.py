import os
from pathlib import Path

from flask import Flask, request, redirect, url_for, flash, render_template
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from hackerspace.logger import get_logger

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per day", "200 per hour"],
    storage_uri="memory://"  # one process; point at Redis when running several workers
)

PACKAGE_DIR = Path(__file__).parent

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://unpkg.com; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https:; "
    "font-src 'self' data:;"
)


def _env_flag(name, default='True'):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def _default_database_uri():
    instance_dir = PACKAGE_DIR.parent / 'instance'
    instance_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{(instance_dir / 'hackerspace.db').resolve()}"


def create_app(config_overrides=None):
    """
    Application factory.

    Args:
        config_overrides (dict, optional): Values applied on top of the
            environment-derived configuration (used by tests).
    """
    logger = get_logger("hackerspace")
    logger.info("Creating hackerspace application")

    app = Flask(__name__,
                template_folder=str(PACKAGE_DIR / 'presentation' / 'templates'),
                static_folder=str(PACKAGE_DIR / 'presentation' / 'static'))

    _configure(app, dict(config_overrides or {}), logger)
    _init_extensions(app)

    # Models must be imported before the first create_all/migration
    from hackerspace.data.core import Account, Circle, CircleMember, Event
    from hackerspace.data.tools import ToolDescription, ToolCheckout

    from hackerspace.auth import auth
    from hackerspace.presentation.routes import main, init_app as init_routes

    app.register_blueprint(auth)
    app.register_blueprint(main)
    init_routes(app)

    _register_request_hooks(app)
    _register_error_handlers(app)

    logger.info("Hackerspace application ready")
    return app


def _configure(app, overrides, logger):
    """Environment configuration; overrides win over every environment value"""
    secret_key = overrides.get('SECRET_KEY') or os.environ.get('SECRET_KEY')
    if not secret_key:
        logger.critical("SECRET_KEY is not set, refusing to start")
        raise RuntimeError("SECRET_KEY environment variable is required")

    secure_cookies = _env_flag('SESSION_COOKIE_SECURE', 'False')
    app.config.update(
        SECRET_KEY=secret_key,
        SQLALCHEMY_DATABASE_URI=(overrides.get('SQLALCHEMY_DATABASE_URI')
                                 or os.environ.get('DATABASE_URL')
                                 or _default_database_uri()),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        ENABLE_HTTPS=_env_flag('ENABLE_HTTPS', 'False'),
        FORCE_HTTPS_REDIRECT=_env_flag('FORCE_HTTPS_REDIRECT', 'False'),
        SESSION_COOKIE_NAME='hackerspace-session',
        SESSION_COOKIE_SECURE=secure_cookies,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
        PERMANENT_SESSION_LIFETIME=int(os.environ.get('PERMANENT_SESSION_LIFETIME', str(86400 * 7))),
        REMEMBER_COOKIE_SECURE=secure_cookies,
        REMEMBER_COOKIE_HTTPONLY=True,
    )
    app.config.update(overrides)

    if not app.config['ENABLE_HTTPS']:
        logger.warning("HTTPS enforcement disabled; use only for local development")
    logger.debug(f"Database backend: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]}")


def _init_extensions(app):
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)

    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    login_manager.login_message_category = 'info'
    login_manager.unauthorized_handler(_unauthorized)


def _unauthorized():
    """HTMX callers get a fragment and JSON callers a 401 instead of the login redirect"""
    if request.headers.get('HX-Request') == 'true':
        return ('<div class="alert alert-warning">Please <a href="/login">log in</a> to continue.</div>',
                401, {'Content-Type': 'text/html; charset=utf-8'})
    if request.accept_mimetypes.best == 'application/json':
        return {'error': 'Authentication required'}, 401
    flash(login_manager.login_message, login_manager.login_message_category)
    return redirect(url_for('auth.login', next=request.path))


def _register_request_hooks(app):

    @app.before_request
    def redirect_to_https():
        if not (app.config.get('ENABLE_HTTPS') and app.config.get('FORCE_HTTPS_REDIRECT')):
            return None
        if request.is_secure or request.headers.get('X-Forwarded-Proto') == 'https':
            return None
        return redirect(request.url.replace('http://', 'https://', 1), code=301)

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Content-Security-Policy'] = CONTENT_SECURITY_POLICY
        if app.config.get('ENABLE_HTTPS'):
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response


def _register_error_handlers(app):

    @app.errorhandler(403)
    def forbidden(error):
        return render_template('errors/403.html'), 403

    @app.errorhandler(404)
    def not_found(error):
        return render_template('errors/404.html'), 404
