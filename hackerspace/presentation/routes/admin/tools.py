"""
Admin tool management routes
CRUD operations for ToolDescription
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required, current_user
from hackerspace.data.tools.tool_description import ToolDescription
from hackerspace.data.tools.tool_checkout import ToolCheckout
from hackerspace.data.core.circle import Circle
from hackerspace.buisness.core.audit import EventAuditRecorder
from hackerspace.services.tools.tool_service import ToolService
from hackerspace import db
from hackerspace.logger import get_logger
from . import admin_required

logger = get_logger("hackerspace.routes.admin.tools")
bp = Blueprint('admin_tools', __name__)


def _read_tool_form():
    name = (request.form.get('name') or '').strip()
    description = (request.form.get('description') or '').strip() or None
    circle_id = request.form.get('circle_id', type=int) or None
    return name, description, circle_id


def _validate_tool_form(name, circle_id):
    if not name:
        return 'Tool name is required'
    if circle_id is not None and db.session.get(Circle, circle_id) is None:
        return 'Selected circle does not exist'
    return None


@bp.route('')
@login_required
@admin_required
def list():
    """List all tools with their checkout counts"""
    tools = ToolDescription.query.order_by(ToolDescription.name).all()
    open_tool_ids = {
        row.tool_id for row in
        ToolCheckout.query.filter(ToolCheckout.checkin_at.is_(None)).with_entities(ToolCheckout.tool_id)
    }
    return render_template('admin/tools/list.html', tools=tools, open_tool_ids=open_tool_ids)


@bp.route('/create', methods=['GET', 'POST'])
@login_required
@admin_required
def create():
    """Create new tool"""
    options = ToolService.get_form_options()

    if request.method == 'POST':
        name, description, circle_id = _read_tool_form()

        error = _validate_tool_form(name, circle_id)
        if error:
            flash(error, 'error')
            return render_template('admin/tools/form.html', tool=None, **options), 400

        tool = ToolDescription(
            name=name,
            description=description,
            circle_id=circle_id,
            created_by_id=current_user.id,
            updated_by_id=current_user.id
        )
        db.session.add(tool)
        db.session.commit()

        EventAuditRecorder().record('admin', 'tool_create', current_user.id, text1=tool.name, int1=tool.id)
        logger.info(f"Tool created: {tool.name} (ID: {tool.id}) by {current_user.username}")
        flash('Tool created successfully', 'success')
        return redirect(url_for('admin_tools.list'))

    return render_template('admin/tools/form.html', tool=None, **options)


@bp.route('/<int:tool_id>/edit', methods=['GET', 'POST'])
@login_required
@admin_required
def edit(tool_id):
    """Edit tool"""
    tool = db.get_or_404(ToolDescription, tool_id)
    options = ToolService.get_form_options()

    if request.method == 'POST':
        name, description, circle_id = _read_tool_form()

        error = _validate_tool_form(name, circle_id)
        if error:
            flash(error, 'error')
            return render_template('admin/tools/form.html', tool=tool, **options), 400

        tool.name = name
        tool.description = description
        tool.circle_id = circle_id
        tool.updated_by_id = current_user.id
        db.session.commit()

        EventAuditRecorder().record('admin', 'tool_update', current_user.id, text1=tool.name, int1=tool.id)
        logger.info(f"Tool updated: {tool.name} (ID: {tool.id}) by {current_user.username}")
        flash('Tool updated successfully', 'success')
        return redirect(url_for('admin_tools.list'))

    return render_template('admin/tools/form.html', tool=tool, **options)


@bp.route('/<int:tool_id>/delete', methods=['POST'])
@login_required
@admin_required
def delete(tool_id):
    """Delete tool; refused while it is checked out or has checkout history"""
    tool = db.get_or_404(ToolDescription, tool_id)

    if tool.checkouts.filter(ToolCheckout.checkin_at.is_(None)).count() > 0:
        flash(f"Tool '{tool.name}' is checked out and cannot be deleted", 'error')
        return redirect(url_for('admin_tools.list'))

    if tool.checkouts.count() > 0:
        flash(f"Tool '{tool.name}' has checkout history and cannot be deleted", 'error')
        return redirect(url_for('admin_tools.list'))

    name = tool.name
    db.session.delete(tool)
    db.session.commit()

    EventAuditRecorder().record('admin', 'tool_delete', current_user.id, text1=name, int1=tool_id)
    logger.info(f"Tool deleted: {name} (ID: {tool_id}) by {current_user.username}")
    flash('Tool deleted successfully', 'success')
    return redirect(url_for('admin_tools.list'))
