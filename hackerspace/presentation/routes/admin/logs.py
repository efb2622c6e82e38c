"""
Admin event log routes
"""

from flask import Blueprint, render_template, request
from flask_login import login_required
from hackerspace.services.core.event_service import EventService
from . import admin_required

bp = Blueprint('admin_logs', __name__)


@bp.route('')
@login_required
@admin_required
def list():
    """Audit events, most recent first"""
    page = request.args.get('page', 1, type=int)
    events = EventService.get_list_data(request=request, page=page)
    return render_template('admin/logs/list.html',
                           events=events,
                           domains=EventService.get_domains(),
                           current_domain=request.args.get('domain'))
