"""
Tool API routes
Tool board, active checkouts, checkout and checkin.

Every endpoint answers with an HTMX fragment, or with JSON when the client
asks for it (Accept: application/json or ?format=json).
"""

from flask import Blueprint, render_template, request, current_app, jsonify
from flask_login import login_required

from hackerspace.buisness.core.identity import current_principal
from hackerspace.buisness.tools.errors import (
    ToolDomainError,
    ToolNotFoundError,
    CheckoutNotFoundError,
    ToolConflictError,
    CheckoutStateError,
    CheckoutForbiddenError,
    ToolPersistenceError,
)
from hackerspace.services.tools.tool_service import ToolService
from hackerspace.logger import get_logger

logger = get_logger("hackerspace.routes.tools")
bp = Blueprint('tools', __name__)

CHECKOUTS_CHANGED = 'checkoutsChanged'


def _lifecycle():
    return current_app.extensions['tool_lifecycle_manager']


def _gateway():
    return current_app.extensions['tool_gateway']


def _wants_json():
    return request.args.get('format') == 'json' or request.accept_mimetypes.best == 'application/json'


def _result(message, status=200, category='success', trigger=None, data=None):
    """Render a result message as JSON or as an alert fragment"""
    if _wants_json():
        body = {'message': message} if status < 400 else {'error': message}
        if data is not None:
            body.update(data)
        response = jsonify(body)
    else:
        response = current_app.make_response(
            render_template('tools/partials/result.html', message=message, category=category)
        )
    response.status_code = status
    if trigger:
        response.headers['HX-Trigger'] = trigger
    return response


def _domain_error_message(error, action):
    if isinstance(error, ToolNotFoundError):
        return 'Tool not found'
    if isinstance(error, CheckoutNotFoundError):
        return 'Checkout not found'
    if isinstance(error, ToolConflictError):
        holder = error.held_by_name or 'another member'
        return f"Tool '{error.tool_name}' is already checked out to {holder}"
    if isinstance(error, CheckoutStateError):
        return str(error)
    if isinstance(error, CheckoutForbiddenError):
        return 'You can only check in tools you checked out'
    return action


def _error_category(error):
    if isinstance(error, (ToolConflictError, CheckoutStateError)):
        return 'warning'
    return 'error'


@bp.route('', methods=['GET'])
@login_required
def list_tools():
    """All tools with their availability"""
    try:
        cards = ToolService.get_tool_cards(_gateway())
    except ToolPersistenceError:
        return _result('Failed to load tools', status=500, category='error')

    logger.debug(f"Tool board returned {len(cards)} tools")

    if _wants_json():
        return jsonify({'tools': [card.to_dict() for card in cards]})
    return render_template('tools/partials/tool_list.html', cards=cards)


@bp.route('/checkouts', methods=['GET'])
@login_required
def active_checkouts():
    """Currently checked out tools, most recent first"""
    principal = current_principal()
    try:
        checkouts = _lifecycle().list_open_checkouts()
    except ToolPersistenceError:
        return _result('Failed to load active checkouts', status=500, category='error')

    if _wants_json():
        return jsonify({'checkouts': [checkout.to_dict() for checkout in checkouts]})
    return render_template('tools/partials/checkouts.html', checkouts=checkouts, principal=principal)


@bp.route('/checkout', methods=['POST'])
@login_required
def checkout():
    """Check a tool out to the logged-in account"""
    principal = current_principal()
    tool_id = request.form.get('tool_id', type=int)
    if tool_id is None:
        return _result('Invalid tool ID', status=400, category='error')

    try:
        record = _lifecycle().check_out(tool_id, principal.account_id)
    except ToolPersistenceError:
        logger.error(f"Checkout of tool {tool_id} by {principal.username} failed in storage")
        tool_name = _tool_name_or_id(tool_id)
        return _result(f"Failed to checkout tool '{tool_name}'", status=500, category='error')
    except ToolDomainError as e:
        logger.info(f"Checkout of tool {tool_id} by {principal.username} refused: {e}")
        return _result(_domain_error_message(e, 'Failed to checkout tool'),
                       status=e.status_code, category=_error_category(e))

    return _result(f"Successfully checked out tool '{record.tool_name}'",
                   status=200, trigger=CHECKOUTS_CHANGED, data={'checkout': record.to_dict()})


@bp.route('/checkin', methods=['POST'])
@login_required
def checkin():
    """Check a tool back in; holders and admins only"""
    principal = current_principal()
    checkout_id = request.form.get('checkout_id', type=int)
    if checkout_id is None:
        return _result('Invalid checkout ID', status=400, category='error')

    try:
        record = _lifecycle().check_in(checkout_id, principal.account_id, principal.is_admin)
    except ToolPersistenceError:
        logger.error(f"Checkin of checkout {checkout_id} by {principal.username} failed in storage")
        return _result('Failed to check in tool', status=500, category='error')
    except ToolDomainError as e:
        logger.info(f"Checkin of checkout {checkout_id} by {principal.username} refused: {e}")
        return _result(_domain_error_message(e, 'Failed to check in tool'),
                       status=e.status_code, category=_error_category(e))

    return _result(f"Successfully checked in tool '{record.tool_name}'",
                   status=200, trigger=CHECKOUTS_CHANGED, data={'checkout': record.to_dict()})


def _tool_name_or_id(tool_id):
    try:
        return _gateway().find_tool(tool_id).name
    except ToolDomainError:
        return tool_id
