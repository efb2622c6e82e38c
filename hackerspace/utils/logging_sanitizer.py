"""
Redaction of credentials before request data is logged
"""

from typing import Any, Dict, Mapping

from werkzeug.datastructures import MultiDict

REDACTED = '[REDACTED]'

# Keys whose values never reach a log line (compared lower-cased)
SENSITIVE_FIELDS = frozenset({
    'password',
    'password_confirm',
    'confirm_password',
    'current_password',
    'new_password',
    'old_password',
    'secret',
    'token',
    'reset_token',
    'api_key',
    'session_id',
    'csrf_token',
})


def sanitize_dict(data: Mapping[str, Any], redact_text: str = REDACTED) -> Dict[str, Any]:
    """
    Copy of ``data`` with sensitive values replaced, nested mappings included.

    >>> sanitize_dict({'username': 'alice', 'password': 'hunter22'})
    {'username': 'alice', 'password': '[REDACTED]'}
    """
    if not data:
        return data

    return {
        key: redact_text if key.lower() in SENSITIVE_FIELDS
        else sanitize_dict(value, redact_text) if isinstance(value, Mapping)
        else value
        for key, value in data.items()
    }


def sanitize_form_data(form_data: MultiDict, redact_text: str = REDACTED) -> Dict[str, Any]:
    """First value of every form field, redacted; for ``logger.debug(f"...{sanitize_form_data(request.form)}")``"""
    return sanitize_dict(form_data.to_dict(), redact_text)
