"""
Admin account routes
List, create and edit member accounts; activate and deactivate them
"""

from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required, current_user
from hackerspace.data.core.user_info.account import Account
from hackerspace.data.core.user_info.password_validator import PasswordValidator
from hackerspace.buisness.core.audit import EventAuditRecorder
from hackerspace.utils.logging_sanitizer import sanitize_form_data
from hackerspace import db
from hackerspace.logger import get_logger
from . import admin_required

logger = get_logger("hackerspace.routes.admin.accounts")
bp = Blueprint('admin_accounts', __name__)


def _read_account_form():
    return {
        'username': (request.form.get('username') or '').strip(),
        'email': (request.form.get('email') or '').strip(),
        'name': (request.form.get('name') or '').strip() or None,
        'phone': (request.form.get('phone') or '').strip() or None,
        'is_admin': request.form.get('is_admin') == 'on',
    }


def _validate_account_form(fields, account=None):
    """Returns an error message, or None when the form can be saved"""
    if not fields['username'] or not fields['email']:
        return 'Username and email are required'

    existing = Account.query.filter_by(username=fields['username']).first()
    if existing and existing is not account:
        return 'Username already exists'

    existing = Account.query.filter_by(email=fields['email']).first()
    if existing and existing is not account:
        return 'Email already exists'

    password = request.form.get('password')
    if account is None or password:
        is_valid, error = PasswordValidator.validate(password, request.form.get('confirm_password') or '')
        if not is_valid:
            return error
    return None


@bp.route('')
@login_required
@admin_required
def list():
    """All accounts except the system account"""
    accounts = Account.query.filter(Account.is_system == False).order_by(Account.username).all()
    return render_template('admin/accounts/list.html', accounts=accounts)


@bp.route('/create', methods=['GET', 'POST'])
@login_required
@admin_required
def create():
    """Create a member account"""
    if request.method == 'POST':
        logger.debug(f"Account create form: {sanitize_form_data(request.form)}")
        fields = _read_account_form()

        error = _validate_account_form(fields)
        if error:
            flash(error, 'error')
            return render_template('admin/accounts/form.html', account=None), 400

        account = Account(is_active=True, **fields)
        account.set_password(request.form.get('password'))
        db.session.add(account)
        db.session.commit()

        EventAuditRecorder().record('admin', 'account_create', current_user.id,
                                    text1=account.username, int1=account.id)
        logger.info(f"Account created: {account.username} (ID: {account.id}) by {current_user.username}")
        flash(f'Account {account.username} created', 'success')
        return redirect(url_for('admin_accounts.list'))

    return render_template('admin/accounts/form.html', account=None)


@bp.route('/<int:account_id>/edit', methods=['GET', 'POST'])
@login_required
@admin_required
def edit(account_id):
    """Edit an account; a filled-in password field resets the password"""
    account = db.get_or_404(Account, account_id)

    if account.is_system:
        flash('The system account cannot be edited', 'error')
        return redirect(url_for('admin_accounts.list'))

    if request.method == 'POST':
        fields = _read_account_form()

        error = _validate_account_form(fields, account)
        if error:
            flash(error, 'error')
            return render_template('admin/accounts/form.html', account=account), 400

        if account.id == current_user.id and not fields['is_admin']:
            flash('You cannot remove your own admin rights', 'error')
            return render_template('admin/accounts/form.html', account=account), 400

        for key, value in fields.items():
            setattr(account, key, value)
        password_reset = bool(request.form.get('password'))
        if password_reset:
            account.set_password(request.form.get('password'))
        db.session.commit()

        EventAuditRecorder().record('admin', 'account_update', current_user.id,
                                    text1=account.username, int1=account.id,
                                    int2=1 if password_reset else 0)
        logger.info(f"Account updated: {account.username} (ID: {account.id}) by {current_user.username}")
        flash(f'Account {account.username} updated', 'success')
        return redirect(url_for('admin_accounts.list'))

    return render_template('admin/accounts/form.html', account=account)


@bp.route('/<int:account_id>/toggle-active', methods=['POST'])
@login_required
@admin_required
def toggle_active(account_id):
    """Deactivated accounts can no longer log in; their checkout history stays"""
    account = db.get_or_404(Account, account_id)

    if account.is_system:
        flash('The system account cannot be changed', 'error')
        return redirect(url_for('admin_accounts.list'))

    if account.id == current_user.id:
        flash('You cannot deactivate your own account', 'error')
        return redirect(url_for('admin_accounts.list'))

    account.is_active = not account.is_active
    db.session.commit()

    key = 'account_activate' if account.is_active else 'account_deactivate'
    EventAuditRecorder().record('admin', key, current_user.id, text1=account.username, int1=account.id)
    logger.info(f"Account {account.username} {'activated' if account.is_active else 'deactivated'} "
                f"by {current_user.username}")
    flash(f"Account {account.username} {'activated' if account.is_active else 'deactivated'}", 'success')
    return redirect(url_for('admin_accounts.list'))
