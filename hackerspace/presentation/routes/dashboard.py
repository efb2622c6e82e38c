"""
Dashboard routes
Landing page with the tool board and active checkouts
"""

from flask import render_template
from flask_login import login_required, current_user
from hackerspace.data.core.user_info.account import Account
from hackerspace.data.tools.tool_description import ToolDescription
from hackerspace.data.tools.tool_checkout import ToolCheckout
from hackerspace.logger import get_logger
from . import main

logger = get_logger("hackerspace.routes.dashboard")


@main.route('/')
@login_required
def index():
    """Dashboard; tool panels are loaded by HTMX from the tool API"""
    logger.debug(f"Account {current_user.username} accessing dashboard")

    stats = {
        'total_tools': ToolDescription.query.count(),
        'open_checkouts': ToolCheckout.query.filter(ToolCheckout.checkin_at.is_(None)).count(),
        'my_checkouts': ToolCheckout.query.filter(
            ToolCheckout.checkin_at.is_(None),
            ToolCheckout.account_id == current_user.id
        ).count(),
        'total_accounts': Account.query.count(),
    }

    return render_template('index.html', **stats)
