"""
Tool checkout domain: lifecycle rules, persistence gateway and errors
"""

from hackerspace.buisness.tools.errors import (
    ToolDomainError,
    ToolNotFoundError,
    CheckoutNotFoundError,
    ToolConflictError,
    CheckoutStateError,
    CheckoutForbiddenError,
    ToolPersistenceError,
)
from hackerspace.buisness.tools.gateway import ToolGateway
from hackerspace.buisness.tools.lifecycle_manager import ToolLifecycleManager
from hackerspace.buisness.tools.records import CheckoutRecord, ToolRecord

__all__ = [
    'ToolDomainError',
    'ToolNotFoundError',
    'CheckoutNotFoundError',
    'ToolConflictError',
    'CheckoutStateError',
    'CheckoutForbiddenError',
    'ToolPersistenceError',
    'ToolGateway',
    'ToolLifecycleManager',
    'CheckoutRecord',
    'ToolRecord',
]
