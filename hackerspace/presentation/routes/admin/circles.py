"""
Admin circle routes
List and create circles, add and remove members
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required, current_user
from hackerspace.data.core.circle import Circle, CircleMember
from hackerspace.data.core.user_info.account import Account
from hackerspace.buisness.core.audit import EventAuditRecorder
from hackerspace import db
from hackerspace.logger import get_logger
from . import admin_required

logger = get_logger("hackerspace.routes.admin.circles")
bp = Blueprint('admin_circles', __name__)


@bp.route('', methods=['GET', 'POST'])
@login_required
@admin_required
def list():
    """List circles; POST creates a new one"""
    if request.method == 'POST':
        name = (request.form.get('name') or '').strip()
        description = (request.form.get('description') or '').strip()

        if not name:
            flash('Circle name is required', 'error')
        elif Circle.query.filter_by(name=name).first():
            flash('Circle already exists', 'error')
        else:
            circle = Circle(
                name=name,
                description=description,
                created_by_id=current_user.id,
                updated_by_id=current_user.id
            )
            db.session.add(circle)
            db.session.commit()
            EventAuditRecorder().record('admin', 'circle_create', current_user.id, text1=name, int1=circle.id)
            logger.info(f"Circle created: {name} by {current_user.username}")
            flash('Circle created successfully', 'success')
        return redirect(url_for('admin_circles.list'))

    circles = Circle.query.order_by(Circle.name).all()
    return render_template('admin/circles/list.html', circles=circles)


@bp.route('/<int:circle_id>')
@login_required
@admin_required
def detail(circle_id):
    circle = db.get_or_404(Circle, circle_id)
    member_ids = {member.account_id for member in circle.members}
    query = Account.query.filter(Account.is_system == False)
    if member_ids:
        query = query.filter(~Account.id.in_(member_ids))
    candidates = query.order_by(Account.username).all()
    return render_template('admin/circles/detail.html', circle=circle, candidates=candidates)


@bp.route('/<int:circle_id>/members', methods=['POST'])
@login_required
@admin_required
def add_member(circle_id):
    circle = db.get_or_404(Circle, circle_id)
    account_id = request.form.get('account_id', type=int)
    account = db.session.get(Account, account_id) if account_id else None

    if account is None:
        flash('Please select an account', 'error')
        return redirect(url_for('admin_circles.detail', circle_id=circle.id))

    if circle.has_member(account.id):
        flash(f'{account.username} is already a member of {circle.name}', 'warning')
        return redirect(url_for('admin_circles.detail', circle_id=circle.id))

    db.session.add(CircleMember(
        circle_id=circle.id,
        account_id=account.id,
        issuer_id=current_user.id,
        comment=(request.form.get('comment') or '').strip() or None,
        created_by_id=current_user.id,
        updated_by_id=current_user.id
    ))
    db.session.commit()

    EventAuditRecorder().record('admin', 'circle_member_add', current_user.id,
                                text1=circle.name, int1=circle.id, int2=account.id)
    flash(f'{account.username} added to {circle.name}', 'success')
    return redirect(url_for('admin_circles.detail', circle_id=circle.id))


@bp.route('/<int:circle_id>/members/<int:member_id>/remove', methods=['POST'])
@login_required
@admin_required
def remove_member(circle_id, member_id):
    member = CircleMember.query.filter_by(id=member_id, circle_id=circle_id).first_or_404()
    account_id = member.account_id
    db.session.delete(member)
    db.session.commit()

    EventAuditRecorder().record('admin', 'circle_member_remove', current_user.id,
                                int1=circle_id, int2=account_id)
    flash('Member removed', 'success')
    return redirect(url_for('admin_circles.detail', circle_id=circle_id))
