"""
Admin routes
Admin panel index and the admin_required decorator
"""

from functools import wraps

from flask import Blueprint, render_template, abort
from flask_login import login_required, current_user
from hackerspace.data.core.user_info.account import Account
from hackerspace.data.core.circle import Circle
from hackerspace.data.tools.tool_description import ToolDescription
from hackerspace.logger import get_logger

bp = Blueprint('admin', __name__)
logger = get_logger("hackerspace.routes.admin")


def admin_required(f):
    """Decorator to require admin access"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_admin:
            logger.warning(f"Non-admin account {current_user.username if current_user.is_authenticated else 'anonymous'} attempted to access admin page")
            abort(403)
        return f(*args, **kwargs)
    return decorated_function


@bp.route('/')
@login_required
@admin_required
def index():
    """Admin dashboard index page"""
    logger.info(f"Admin account {current_user.username} accessing admin panel")

    return render_template('admin/index.html',
                           total_accounts=Account.query.count(),
                           total_tools=ToolDescription.query.count(),
                           total_circles=Circle.query.count())
