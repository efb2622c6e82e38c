"""
Domain exceptions for tool checkout business logic

These exceptions represent business rule violations and storage failures
raised by the tool lifecycle layer. Each carries the HTTP status category
the presentation layer answers with.
"""

from typing import Optional


class ToolDomainError(Exception):
    """Base exception for all tool domain errors"""
    status_code = 400


class ToolNotFoundError(ToolDomainError):
    """Raised when a referenced tool does not exist"""
    status_code = 404

    def __init__(self, tool_id: int):
        super().__init__(f"Tool {tool_id} not found")
        self.tool_id = tool_id


class CheckoutNotFoundError(ToolDomainError):
    """Raised when a referenced checkout does not exist"""
    status_code = 404

    def __init__(self, checkout_id: int):
        super().__init__(f"Checkout {checkout_id} not found")
        self.checkout_id = checkout_id


class ToolConflictError(ToolDomainError):
    """Raised when a tool already has an open checkout (double booking)"""
    status_code = 409

    def __init__(self, tool_id: int, tool_name: str, held_by: Optional[int], held_by_name: Optional[str]):
        super().__init__(f"Tool '{tool_name}' is already checked out to {held_by_name}")
        self.tool_id = tool_id
        self.tool_name = tool_name
        self.held_by = held_by
        self.held_by_name = held_by_name


class CheckoutStateError(ToolDomainError):
    """Raised when a checkout transition is not allowed from its current state"""
    status_code = 409

    def __init__(self, checkout_id: int, message: str):
        super().__init__(message)
        self.checkout_id = checkout_id

    @classmethod
    def already_checked_in(cls, checkout_id: int, tool_name) -> "CheckoutStateError":
        return cls(checkout_id, f"Tool '{tool_name}' is already checked in")


class CheckoutForbiddenError(ToolDomainError):
    """Raised when someone other than the holder (and not an admin) checks a tool in"""
    status_code = 403

    def __init__(self, checkout_id: int, account_id: int):
        super().__init__(f"Account {account_id} may not check in checkout {checkout_id}")
        self.checkout_id = checkout_id
        self.account_id = account_id


class ToolPersistenceError(ToolDomainError):
    """Raised when the underlying store fails; the original error is kept as __cause__"""
    status_code = 500
