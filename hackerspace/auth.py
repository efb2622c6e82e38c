from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_user, logout_user, login_required, current_user
from urllib.parse import urlparse
from hackerspace.data.core.user_info.account import Account
from hackerspace.data.core.user_info.password_validator import PasswordValidator
from hackerspace.buisness.core.audit import EventAuditRecorder
from hackerspace.utils.logging_sanitizer import sanitize_form_data
from hackerspace import db, limiter
from hackerspace.logger import get_logger

logger = get_logger("hackerspace.auth")
auth = Blueprint('auth', __name__)


def _is_safe_next(target):
    if not target:
        return False
    parsed = urlparse(target)
    return parsed.netloc == '' and parsed.scheme == '' and target.startswith('/')


@auth.route('/login', methods=['GET', 'POST'])
@limiter.limit("10 per minute", methods=['POST'])
def login():
    if current_user.is_authenticated:
        logger.debug(f"Account {current_user.username} already authenticated, redirecting to main")
        return redirect(url_for('main.index'))

    if request.method == 'POST':
        username = (request.form.get('username') or '').strip()
        password = request.form.get('password')

        logger.debug(f"Login attempt: {sanitize_form_data(request.form)}")

        if not username or not password:
            logger.warning(f"Login attempt with missing credentials for username: {username}")
            flash('Please enter both username and password', 'error')
            return render_template('auth/login.html'), 400

        account = Account.query.filter(
            db.or_(Account.username == username, Account.email == username)
        ).first()

        if account is None or not account.check_password(password):
            logger.warning(f"Failed login attempt for username: {username}")
            flash('Invalid username or password', 'error')
            return render_template('auth/login.html'), 401

        if not account.is_active:
            logger.warning(f"Login attempt for disabled account: {username}")
            flash('Account is disabled', 'error')
            return render_template('auth/login.html'), 403

        login_user(account)
        EventAuditRecorder().record('auth', 'login', account.id, text1=account.username)
        logger.info(f"Successful login for account: {account.username}")

        next_page = request.args.get('next')
        if not _is_safe_next(next_page):
            next_page = url_for('main.index')

        flash(f'Welcome, {account.username}!', 'success')
        return redirect(next_page)

    logger.debug("Login page accessed")
    return render_template('auth/login.html')


@auth.route('/logout')
@login_required
def logout():
    username = current_user.username
    account_id = current_user.id
    logout_user()
    EventAuditRecorder().record('auth', 'logout', account_id, text1=username)
    logger.info(f"Account logged out: {username}")
    flash('You have been logged out', 'info')
    return redirect(url_for('auth.login'))


def _current_password_error():
    """Flash message and status when the current password is missing or wrong, else None"""
    current_password = request.form.get('current_password')
    if not current_password:
        return 'Current password is required', 400
    if not current_user.check_password(current_password):
        logger.warning(f"Incorrect current password from account {current_user.username}")
        return 'Current password is incorrect', 401
    return None


@auth.route('/profile', methods=['GET', 'POST'])
@login_required
def profile():
    """Own contact details; saving them asks for the current password"""
    if request.method == 'POST':
        logger.debug(f"Profile update: {sanitize_form_data(request.form)}")

        failure = _current_password_error()
        if failure:
            flash(failure[0], 'error')
            return render_template('auth/profile.html'), failure[1]

        email = (request.form.get('email') or '').strip()
        if not email:
            flash('Email is required', 'error')
            return render_template('auth/profile.html'), 400

        existing = Account.query.filter_by(email=email).first()
        if existing and existing.id != current_user.id:
            flash('Email already exists', 'error')
            return render_template('auth/profile.html'), 400

        current_user.email = email
        current_user.name = (request.form.get('name') or '').strip() or None
        current_user.phone = (request.form.get('phone') or '').strip() or None
        db.session.commit()

        EventAuditRecorder().record('auth', 'profile_update', current_user.id, text1=current_user.username)
        logger.info(f"Profile updated for account: {current_user.username}")
        flash('Profile updated', 'success')
        return redirect(url_for('auth.profile'))

    return render_template('auth/profile.html')


@auth.route('/profile/password', methods=['POST'])
@login_required
def change_password():
    logger.debug(f"Password change: {sanitize_form_data(request.form)}")

    failure = _current_password_error()
    if failure:
        flash(failure[0], 'error')
        return render_template('auth/profile.html'), failure[1]

    new_password = request.form.get('new_password')
    is_valid, error = PasswordValidator.validate(new_password, request.form.get('confirm_password') or '')
    if not is_valid:
        flash(error, 'error')
        return render_template('auth/profile.html'), 400

    current_user.set_password(new_password)
    db.session.commit()

    EventAuditRecorder().record('auth', 'password_change', current_user.id, text1=current_user.username)
    logger.info(f"Password changed for account: {current_user.username}")
    flash('Password updated', 'success')
    return redirect(url_for('auth.profile'))
