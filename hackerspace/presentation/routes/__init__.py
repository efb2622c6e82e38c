"""
Routes package for the hackerspace application
"""

from flask import Blueprint
from hackerspace import db
from hackerspace.logger import get_logger

logger = get_logger("hackerspace.routes")

# Create main blueprint
main = Blueprint('main', __name__)

# Import route modules
from . import dashboard


def init_app(app):
    """Register all route blueprints and build the tool lifecycle manager"""
    logger.debug("Initializing route blueprints")

    from hackerspace.buisness.core.audit import EventAuditRecorder
    from hackerspace.buisness.tools.gateway import ToolGateway
    from hackerspace.buisness.tools.lifecycle_manager import ToolLifecycleManager

    gateway = ToolGateway(db.session)
    app.extensions['tool_gateway'] = gateway
    app.extensions['tool_lifecycle_manager'] = ToolLifecycleManager(gateway, audit=EventAuditRecorder())

    from .tools import bp as tools_bp
    from .admin import bp as admin_bp
    from .admin import tools as admin_tools, circles as admin_circles, logs as admin_logs
    from .admin import accounts as admin_accounts

    app.register_blueprint(tools_bp, url_prefix='/api/tools')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(admin_tools.bp, url_prefix='/admin/tools')
    app.register_blueprint(admin_circles.bp, url_prefix='/admin/circles')
    app.register_blueprint(admin_logs.bp, url_prefix='/admin/logs')
    app.register_blueprint(admin_accounts.bp, url_prefix='/admin/accounts')

    logger.info("All route blueprints registered successfully")
